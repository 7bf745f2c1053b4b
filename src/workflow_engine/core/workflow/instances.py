"""Instance engine: starts instances and advances them through their definition.

Every mutation of an instance happens in :meth:`InstanceEngine.execute_action`
under that instance's own lock, so two concurrent calls on one instance can
never both pass the guards against the same current state. Calls on different
instances do not contend.

Callers always receive snapshots (deep copies). The live records never leave
the engine.
"""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime

from .definitions import DefinitionStore
from .models import Action, HistoryEntry, HistoryEventKind, WorkflowDefinition, WorkflowInstance
from .results import FailureReason, Result

logger = logging.getLogger(__name__)


def _is_usable_target(definition: WorkflowDefinition, action: Action) -> bool:
    target = definition.find_state(action.to_state)
    return target is not None and target.enabled


class InstanceEngine:
    def __init__(self, definitions: DefinitionStore) -> None:
        self._definitions = definitions
        self._lock = threading.Lock()
        self._instances: dict[str, WorkflowInstance] = {}
        self._instance_locks: dict[str, threading.Lock] = {}

    def _lookup(self, instance_id: str) -> tuple[WorkflowInstance, threading.Lock] | None:
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is None:
                return None
            return instance, self._instance_locks[instance_id]

    def start(self, definition_id: str) -> Result[WorkflowInstance]:
        definition = self._definitions.get(definition_id)
        if definition is None:
            return self._reject(
                Result.fail(
                    FailureReason.DEFINITION_NOT_FOUND,
                    f"Workflow definition '{definition_id}' not found.",
                    definition_id=definition_id,
                )
            )

        initial = next(iter(definition.initial_states()), None)
        if initial is None or not initial.enabled:
            return self._reject(
                Result.fail(
                    FailureReason.NO_USABLE_INITIAL_STATE,
                    f"Workflow definition '{definition_id}' has no enabled initial state.",
                    definition_id=definition_id,
                    state_id=initial.id if initial is not None else None,
                )
            )

        instance = WorkflowInstance(
            workflow_definition_id=definition_id,
            current_state_id=initial.id,
        )
        instance.history.append(
            HistoryEntry(
                event_kind=HistoryEventKind.STARTED,
                resulting_state=initial.id,
                timestamp=instance.created_at,
            )
        )

        with self._lock:
            self._instances[instance.id] = instance
            self._instance_locks[instance.id] = threading.Lock()
            snapshot = instance.model_copy(deep=True)

        logger.info(
            "Instance started",
            extra={
                "instance_id": instance.id,
                "definition_id": definition_id,
                "state_id": initial.id,
            },
        )
        return Result.success(snapshot)

    def execute_action(self, instance_id: str, action_id: str) -> Result[WorkflowInstance]:
        found = self._lookup(instance_id)
        if found is None:
            return self._reject(
                Result.fail(
                    FailureReason.INSTANCE_NOT_FOUND,
                    f"Instance '{instance_id}' not found.",
                    instance_id=instance_id,
                )
            )
        instance, instance_lock = found

        with instance_lock:
            result = self._execute_locked(instance, action_id)

        if result.failure is not None:
            return self._reject(result)

        logger.info(
            "Action executed",
            extra={
                "instance_id": instance_id,
                "action_id": action_id,
                "state_id": result.value.current_state_id if result.value else None,
            },
        )
        return result

    def _execute_locked(
        self, instance: WorkflowInstance, action_id: str
    ) -> Result[WorkflowInstance]:
        definition = self._definitions.get(instance.workflow_definition_id)
        if definition is None:
            return Result.fail(
                FailureReason.DEFINITION_NOT_FOUND,
                f"Workflow definition '{instance.workflow_definition_id}' not found.",
                instance_id=instance.id,
                definition_id=instance.workflow_definition_id,
            )

        # A final state refuses every action, known or not.
        current = definition.find_state(instance.current_state_id)
        if current is not None and current.is_final:
            return Result.fail(
                FailureReason.CANNOT_LEAVE_FINAL_STATE,
                f"Cannot move from final state '{current.id}'.",
                instance_id=instance.id,
                action_id=action_id,
                state_id=current.id,
            )

        action = definition.find_action(action_id)
        if action is None or not action.enabled:
            return Result.fail(
                FailureReason.ACTION_NOT_AVAILABLE,
                f"Action '{action_id}' is unknown or disabled.",
                instance_id=instance.id,
                action_id=action_id,
            )

        if instance.current_state_id not in action.from_states:
            return Result.fail(
                FailureReason.ACTION_NOT_ALLOWED_FROM_CURRENT_STATE,
                f"Action '{action_id}' is not allowed from state '{instance.current_state_id}'.",
                instance_id=instance.id,
                action_id=action_id,
                state_id=instance.current_state_id,
            )

        if not _is_usable_target(definition, action):
            return Result.fail(
                FailureReason.TARGET_STATE_UNAVAILABLE,
                f"Target state '{action.to_state}' is missing or disabled.",
                instance_id=instance.id,
                action_id=action_id,
                state_id=action.to_state,
            )

        now = datetime.now(tz=UTC)
        instance.current_state_id = action.to_state
        instance.updated_at = now
        instance.history.append(
            HistoryEntry(
                event_kind=HistoryEventKind.ACTION_EXECUTED,
                action_id=action.id,
                resulting_state=action.to_state,
                timestamp=now,
            )
        )
        return Result.success(instance.model_copy(deep=True))

    def available_actions(self, instance_id: str) -> list[Action]:
        found = self._lookup(instance_id)
        if found is None:
            return []
        instance, instance_lock = found

        with instance_lock:
            current_state_id = instance.current_state_id
            definition = self._definitions.get(instance.workflow_definition_id)

        if definition is None:
            return []
        current = definition.find_state(current_state_id)
        if current is None or current.is_final:
            return []

        return [
            action.model_copy(deep=True)
            for action in definition.actions
            if action.enabled
            and current_state_id in action.from_states
            and _is_usable_target(definition, action)
        ]

    def get(self, instance_id: str) -> WorkflowInstance | None:
        found = self._lookup(instance_id)
        if found is None:
            return None
        instance, instance_lock = found
        with instance_lock:
            return instance.model_copy(deep=True)

    def list(self) -> list[WorkflowInstance]:
        with self._lock:
            entries = [(i, self._instance_locks[i.id]) for i in self._instances.values()]
        snapshots: list[WorkflowInstance] = []
        for instance, instance_lock in entries:
            with instance_lock:
                snapshots.append(instance.model_copy(deep=True))
        return snapshots

    @staticmethod
    def _reject(result: Result[WorkflowInstance]) -> Result[WorkflowInstance]:
        if result.failure is not None:
            logger.info(
                "Instance operation rejected",
                extra={"reason": result.failure.reason.value, **result.failure.details},
            )
        return result
