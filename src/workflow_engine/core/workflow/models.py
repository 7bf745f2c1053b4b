"""Pydantic models for workflow definitions and instances.

Field names are snake_case in Python and camelCase on the wire
(``isInitial``, ``fromStates``, ``currentStateId`` ...). Both spellings are
accepted on input.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class State(_WireModel):
    id: str = Field(..., min_length=1)
    name: str | None = None
    description: str | None = None
    is_initial: bool = Field(default=False, alias="isInitial")
    is_final: bool = Field(default=False, alias="isFinal")
    enabled: bool = True


class Action(_WireModel):
    """A named transition from any of ``from_states`` into ``to_state``."""

    id: str = Field(..., min_length=1)
    name: str | None = None
    from_states: list[str] = Field(default_factory=list, alias="fromStates")
    to_state: str = Field(..., alias="toState")
    enabled: bool = True


class WorkflowDefinition(_WireModel):
    id: str = Field(..., min_length=1)
    name: str | None = None
    description: str | None = None
    states: list[State] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)

    def find_state(self, state_id: str) -> State | None:
        for state in self.states:
            if state.id == state_id:
                return state
        return None

    def find_action(self, action_id: str) -> Action | None:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None

    def initial_states(self) -> list[State]:
        return [s for s in self.states if s.is_initial]


class HistoryEventKind(str, Enum):
    STARTED = "started"
    ACTION_EXECUTED = "action_executed"


class HistoryEntry(_WireModel):
    """One append-only record in an instance's execution history."""

    event_kind: HistoryEventKind = Field(..., alias="eventKind")
    action_id: str | None = Field(default=None, alias="actionId")
    resulting_state: str = Field(..., alias="resultingState")
    timestamp: datetime = Field(default_factory=_utc_now)

    def describe(self) -> str:
        """Render the entry as a single human-readable line."""

        stamp = self.timestamp.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S")
        if self.event_kind is HistoryEventKind.STARTED:
            return f"Started in state '{self.resulting_state}' @ {stamp} UTC"
        return f"Executed action '{self.action_id}' -> '{self.resulting_state}' @ {stamp} UTC"


class WorkflowInstance(_WireModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    workflow_definition_id: str = Field(..., alias="workflowDefinitionId")
    current_state_id: str = Field(..., alias="currentStateId")
    history: list[HistoryEntry] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utc_now, alias="updatedAt")
