"""FastAPI server adapter for workflow-engine.

This module exposes a REST API over the workflow service.

Design intent:
- Keep every decision in `workflow_engine.core.workflow`
- Keep server-specific concerns (routing, CORS, status codes) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from workflow_engine.server.app import create_app
