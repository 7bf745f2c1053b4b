"""Unit tests for the instance engine.

These tests assert that illegal actions are refused without touching the
instance and that legal ones move it exactly one step.
"""

from __future__ import annotations

from workflow_engine.core.workflow.models import Action, HistoryEventKind, State
from workflow_engine.core.workflow.results import FailureReason
from workflow_engine.core.workflow.service import WorkflowService


def _started(service: WorkflowService, definition_id: str = "doc-review") -> str:
    result = service.start_instance(definition_id)
    assert result.value is not None
    return result.value.id


def test_start_enters_initial_state(review_service: WorkflowService) -> None:
    result = review_service.start_instance("doc-review")

    assert result.ok
    instance = result.value
    assert instance is not None
    assert instance.workflow_definition_id == "doc-review"
    assert instance.current_state_id == "Draft"
    assert len(instance.history) == 1
    entry = instance.history[0]
    assert entry.event_kind is HistoryEventKind.STARTED
    assert entry.action_id is None
    assert entry.resulting_state == "Draft"
    assert entry.timestamp.tzinfo is not None


def test_start_unknown_definition(service: WorkflowService) -> None:
    result = service.start_instance("nope")

    assert result.failure is not None
    assert result.failure.reason is FailureReason.DEFINITION_NOT_FOUND
    assert service.list_instances() == []


def test_start_with_disabled_initial_state(service: WorkflowService, make_definition) -> None:
    definition = make_definition(
        states=[State(id="Draft", is_initial=True, enabled=False), State(id="Review")],
        actions=[],
    )
    assert service.register_definition(definition).ok

    result = service.start_instance(definition.id)

    assert result.failure is not None
    assert result.failure.reason is FailureReason.NO_USABLE_INITIAL_STATE
    assert service.list_instances() == []


def test_start_when_stored_initial_state_is_toggled_off(review_service: WorkflowService) -> None:
    stored = review_service.get_definition("doc-review")
    assert stored is not None
    stored.states[0].enabled = False

    result = review_service.start_instance("doc-review")

    assert result.failure is not None
    assert result.failure.reason is FailureReason.NO_USABLE_INITIAL_STATE


def test_instance_ids_are_unique(review_service: WorkflowService) -> None:
    ids = {_started(review_service) for _ in range(20)}
    assert len(ids) == 20


def test_execute_moves_state_and_appends_history(review_service: WorkflowService) -> None:
    instance_id = _started(review_service)

    result = review_service.execute_action(instance_id, "Submit")

    assert result.ok
    assert result.value is not None
    assert result.value.current_state_id == "Review"
    entry = result.value.history[-1]
    assert entry.event_kind is HistoryEventKind.ACTION_EXECUTED
    assert entry.action_id == "Submit"
    assert entry.resulting_state == "Review"


def test_execute_unknown_instance(review_service: WorkflowService) -> None:
    result = review_service.execute_action("missing", "Submit")

    assert result.failure is not None
    assert result.failure.reason is FailureReason.INSTANCE_NOT_FOUND
    assert result.failure.details["instance_id"] == "missing"


def test_execute_unknown_action(review_service: WorkflowService) -> None:
    instance_id = _started(review_service)

    result = review_service.execute_action(instance_id, "Teleport")

    assert result.failure is not None
    assert result.failure.reason is FailureReason.ACTION_NOT_AVAILABLE


def test_execute_disabled_action_changes_nothing(
    service: WorkflowService, make_definition
) -> None:
    definition = make_definition(
        actions=[Action(id="Submit", from_states=["Draft"], to_state="Review", enabled=False)]
    )
    service.register_definition(definition)
    instance_id = _started(service)

    result = service.execute_action(instance_id, "Submit")

    assert result.failure is not None
    assert result.failure.reason is FailureReason.ACTION_NOT_AVAILABLE
    instance = service.get_instance(instance_id)
    assert instance is not None
    assert instance.current_state_id == "Draft"
    assert len(instance.history) == 1


def test_execute_from_wrong_state_changes_nothing(review_service: WorkflowService) -> None:
    instance_id = _started(review_service)

    result = review_service.execute_action(instance_id, "Approve")

    assert result.failure is not None
    assert result.failure.reason is FailureReason.ACTION_NOT_ALLOWED_FROM_CURRENT_STATE
    assert result.failure.details["state_id"] == "Draft"
    instance = review_service.get_instance(instance_id)
    assert instance is not None
    assert instance.current_state_id == "Draft"
    assert len(instance.history) == 1


def test_execute_into_disabled_target(service: WorkflowService, make_definition) -> None:
    definition = make_definition(
        states=[
            State(id="Draft", is_initial=True),
            State(id="Review", enabled=False),
        ],
        actions=[Action(id="Submit", from_states=["Draft"], to_state="Review")],
    )
    service.register_definition(definition)
    instance_id = _started(service)

    result = service.execute_action(instance_id, "Submit")

    assert result.failure is not None
    assert result.failure.reason is FailureReason.TARGET_STATE_UNAVAILABLE
    assert result.failure.details["state_id"] == "Review"


def test_final_state_refuses_everything(service: WorkflowService, make_definition) -> None:
    definition = make_definition(
        actions=[
            Action(id="Submit", from_states=["Draft"], to_state="Review"),
            Action(id="Approve", from_states=["Review"], to_state="Approved"),
            Action(id="Reopen", from_states=["Approved"], to_state="Draft"),
        ]
    )
    service.register_definition(definition)
    instance_id = _started(service)
    service.execute_action(instance_id, "Submit")
    service.execute_action(instance_id, "Approve")

    for action_id in ("Reopen", "Approve", "Submit", "Teleport"):
        result = service.execute_action(instance_id, action_id)
        assert result.failure is not None
        assert result.failure.reason is FailureReason.CANNOT_LEAVE_FINAL_STATE

    assert service.get_available_actions(instance_id) == []
    instance = service.get_instance(instance_id)
    assert instance is not None
    assert instance.current_state_id == "Approved"
    assert len(instance.history) == 3


def test_final_state_is_reachable(service: WorkflowService, make_definition) -> None:
    definition = make_definition(
        states=[State(id="Open", is_initial=True), State(id="Closed", is_final=True)],
        actions=[Action(id="Close", from_states=["Open"], to_state="Closed")],
    )
    service.register_definition(definition)
    instance_id = _started(service)

    assert service.execute_action(instance_id, "Close").ok


def test_self_loop_keeps_appending_history(service: WorkflowService, make_definition) -> None:
    definition = make_definition(
        states=[State(id="Open", is_initial=True)],
        actions=[Action(id="Comment", from_states=["Open"], to_state="Open")],
    )
    service.register_definition(definition)
    instance_id = _started(service)

    for _ in range(3):
        assert service.execute_action(instance_id, "Comment").ok

    instance = service.get_instance(instance_id)
    assert instance is not None
    assert instance.current_state_id == "Open"
    assert len(instance.history) == 4


def test_available_actions_filters_and_keeps_order(
    service: WorkflowService, make_definition
) -> None:
    definition = make_definition(
        states=[
            State(id="Review", is_initial=True),
            State(id="Draft"),
            State(id="Approved", is_final=True),
            State(id="Archived", enabled=False),
        ],
        actions=[
            Action(id="Reject", from_states=["Review"], to_state="Draft"),
            Action(id="Hold", from_states=["Review"], to_state="Review", enabled=False),
            Action(id="Archive", from_states=["Review"], to_state="Archived"),
            Action(id="Submit", from_states=["Draft"], to_state="Review"),
            Action(id="Approve", from_states=["Draft", "Review"], to_state="Approved"),
        ],
    )
    service.register_definition(definition)
    instance_id = _started(service)

    actions = service.get_available_actions(instance_id)

    assert [a.id for a in actions] == ["Reject", "Approve"]


def test_available_actions_for_unknown_instance(review_service: WorkflowService) -> None:
    assert review_service.get_available_actions("missing") == []


def test_execute_when_definition_is_gone(review_service: WorkflowService) -> None:
    instance_id = _started(review_service)
    del review_service.definitions._definitions["doc-review"]

    result = review_service.execute_action(instance_id, "Submit")

    assert result.failure is not None
    assert result.failure.reason is FailureReason.DEFINITION_NOT_FOUND
    assert result.failure.details["definition_id"] == "doc-review"
    assert review_service.get_available_actions(instance_id) == []
    instance = review_service.get_instance(instance_id)
    assert instance is not None
    assert instance.current_state_id == "Draft"
    assert len(instance.history) == 1


def test_snapshots_do_not_leak_engine_state(review_service: WorkflowService) -> None:
    instance_id = _started(review_service)
    snapshot = review_service.get_instance(instance_id)
    assert snapshot is not None

    snapshot.current_state_id = "Approved"
    snapshot.history.clear()

    fresh = review_service.get_instance(instance_id)
    assert fresh is not None
    assert fresh.current_state_id == "Draft"
    assert len(fresh.history) == 1


def test_updated_at_moves_on_execute(review_service: WorkflowService) -> None:
    instance_id = _started(review_service)
    before = review_service.get_instance(instance_id)
    assert before is not None

    result = review_service.execute_action(instance_id, "Submit")

    assert result.value is not None
    assert result.value.updated_at >= before.updated_at
    assert result.value.created_at == before.created_at
