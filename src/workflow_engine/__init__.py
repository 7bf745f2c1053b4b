"""Workflow Engine.

Register finite-state workflow definitions and run independent instances of
them:
- definitions validated once at registration, then immutable
- instances advanced only through enabled, legal actions
- every failure returned as a tagged result
"""

__version__ = "0.1.0"

from workflow_engine.core.workflow.service import WorkflowService

__all__ = ["__version__", "WorkflowService"]
