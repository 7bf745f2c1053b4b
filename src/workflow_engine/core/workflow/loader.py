"""Read workflow definitions from JSON files.

Schema errors surface as :class:`pydantic.ValidationError`; structural checks
(initial state, references) are left to the definition store.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .models import WorkflowDefinition
from .service import WorkflowService

logger = logging.getLogger(__name__)


def load_definition_file(path: Path) -> WorkflowDefinition:
    raw = json.loads(path.read_text(encoding="utf-8"))
    return WorkflowDefinition.model_validate(raw)


def discover_definition_files(directory: Path) -> list[Path]:
    """Return ``*.json`` files directly under ``directory`` in name order."""

    if not directory.is_dir():
        return []
    return sorted(p for p in directory.glob("*.json") if p.is_file())


def preload_definitions(service: WorkflowService, directory: Path) -> list[str]:
    """Register every definition file under ``directory``.

    Files that fail to parse or validate are logged and skipped. Returns the
    ids that were registered.
    """

    registered: list[str] = []
    for path in discover_definition_files(directory):
        try:
            definition = load_definition_file(path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(
                "Skipping unreadable definition file",
                extra={"path": str(path), "error": str(e)},
            )
            continue

        result = service.register_definition(definition)
        if result.failure is not None:
            logger.warning(
                "Skipping invalid definition file",
                extra={"path": str(path), "reason": result.failure.reason.value},
            )
            continue
        registered.append(definition.id)

    logger.info("Definitions preloaded", extra={"path": str(directory), "count": len(registered)})
    return registered
