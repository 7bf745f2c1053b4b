"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from workflow_engine.core.workflow.models import Action, State, WorkflowDefinition
from workflow_engine.core.workflow.service import WorkflowService

DefinitionFactory = Callable[..., WorkflowDefinition]


@pytest.fixture
def make_definition() -> DefinitionFactory:
    """Build the Draft -> Review -> Approved definition, with overrides."""

    def _make(
        definition_id: str = "doc-review",
        *,
        states: list[State] | None = None,
        actions: list[Action] | None = None,
    ) -> WorkflowDefinition:
        return WorkflowDefinition(
            id=definition_id,
            states=states
            if states is not None
            else [
                State(id="Draft", is_initial=True),
                State(id="Review"),
                State(id="Approved", is_final=True),
            ],
            actions=actions
            if actions is not None
            else [
                Action(id="Submit", from_states=["Draft"], to_state="Review"),
                Action(id="Approve", from_states=["Review"], to_state="Approved"),
            ],
        )

    return _make


@pytest.fixture
def review_definition(make_definition: DefinitionFactory) -> WorkflowDefinition:
    return make_definition()


@pytest.fixture
def service() -> WorkflowService:
    """Provide a fresh, empty workflow service."""
    return WorkflowService()


@pytest.fixture
def review_service(
    service: WorkflowService, review_definition: WorkflowDefinition
) -> WorkflowService:
    """Provide a service with the review definition already registered."""
    assert service.register_definition(review_definition).ok
    return service
