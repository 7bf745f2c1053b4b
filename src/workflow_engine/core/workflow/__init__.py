"""Workflow definitions and the instance state machine.

This package holds the whole decision-making core:
- Definition models and structural validation
- The in-memory definition store
- The instance engine (start, execute action, available actions)
- Tagged failure results instead of exceptions

Adapters (REST server, CLI) only translate in and out of these types.
"""

from .definitions import DefinitionStore, validate_definition
from .instances import InstanceEngine
from .models import (
    Action,
    HistoryEntry,
    HistoryEventKind,
    State,
    WorkflowDefinition,
    WorkflowInstance,
)
from .results import Failure, FailureReason, Result, WorkflowError
from .service import WorkflowService

__all__ = [
    "Action",
    "DefinitionStore",
    "Failure",
    "FailureReason",
    "HistoryEntry",
    "HistoryEventKind",
    "InstanceEngine",
    "Result",
    "State",
    "WorkflowDefinition",
    "WorkflowError",
    "WorkflowInstance",
    "WorkflowService",
    "validate_definition",
]
