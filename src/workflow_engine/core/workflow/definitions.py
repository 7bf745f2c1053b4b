"""Definition registry and structural validation.

A definition is validated once, at registration, and is immutable afterwards.
Nothing downstream re-checks these invariants.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter

from .models import WorkflowDefinition
from .results import FailureReason, Result

logger = logging.getLogger(__name__)


def validate_definition(definition: WorkflowDefinition) -> Result[WorkflowDefinition]:
    """Check the structural invariants of a single definition.

    Order is fixed: initial-state count, unique state ids, then action
    references (per action, target before sources).
    """

    initial_count = len(definition.initial_states())
    if initial_count != 1:
        return Result.fail(
            FailureReason.INVALID_INITIAL_STATE_COUNT,
            f"Workflow must have exactly one initial state (found {initial_count}).",
            definition_id=definition.id,
            initial_state_count=initial_count,
        )

    counts = Counter(s.id for s in definition.states)
    duplicates = [state_id for state_id, n in counts.items() if n > 1]
    if duplicates:
        return Result.fail(
            FailureReason.DUPLICATE_STATE_ID,
            f"State IDs must be unique (duplicate: '{duplicates[0]}').",
            definition_id=definition.id,
            state_id=duplicates[0],
        )

    valid_ids = set(counts)
    for action in definition.actions:
        if action.to_state not in valid_ids:
            return Result.fail(
                FailureReason.DANGLING_STATE_REFERENCE,
                f"Action '{action.id}' references invalid target state '{action.to_state}'.",
                definition_id=definition.id,
                action_id=action.id,
                state_id=action.to_state,
            )
        for from_state in action.from_states:
            if from_state not in valid_ids:
                return Result.fail(
                    FailureReason.DANGLING_STATE_REFERENCE,
                    f"Action '{action.id}' references invalid source state '{from_state}'.",
                    definition_id=definition.id,
                    action_id=action.id,
                    state_id=from_state,
                )

    return Result.success(definition)


class DefinitionStore:
    """In-memory owner of every accepted workflow definition.

    ``register`` stores a deep copy of the caller's object. ``get`` and
    ``list`` return the stored records themselves, not snapshots: mutating a
    returned definition changes what later operations see.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._definitions: dict[str, WorkflowDefinition] = {}

    def register(self, definition: WorkflowDefinition) -> Result[WorkflowDefinition]:
        with self._lock:
            if definition.id in self._definitions:
                result: Result[WorkflowDefinition] = Result.fail(
                    FailureReason.DUPLICATE_DEFINITION,
                    f"Duplicate definition ID '{definition.id}'.",
                    definition_id=definition.id,
                )
            else:
                result = validate_definition(definition)
                if result.ok:
                    # Keep a private copy so the caller's object can't change it later.
                    stored = definition.model_copy(deep=True)
                    self._definitions[stored.id] = stored
                    result = Result.success(stored)

        if result.failure is not None:
            logger.info(
                "Definition rejected",
                extra={"definition_id": definition.id, "reason": result.failure.reason.value},
            )
        else:
            logger.info(
                "Definition registered",
                extra={
                    "definition_id": definition.id,
                    "states": len(definition.states),
                    "actions": len(definition.actions),
                },
            )
        return result

    def get(self, definition_id: str) -> WorkflowDefinition | None:
        with self._lock:
            return self._definitions.get(definition_id)

    def list(self) -> list[WorkflowDefinition]:
        with self._lock:
            return list(self._definitions.values())

    def __contains__(self, definition_id: object) -> bool:
        with self._lock:
            return definition_id in self._definitions

    def __len__(self) -> int:
        with self._lock:
            return len(self._definitions)
