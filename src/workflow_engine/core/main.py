"""CLI entrypoint for working with workflow definition files.

Subcommands:
- validate: check one or more definition files
- run: start an instance of a definition and drive it through actions
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from workflow_engine import __version__
from workflow_engine.core.config import EngineSettings
from workflow_engine.core.logging import configure_logging
from workflow_engine.core.workflow.loader import load_definition_file, preload_definitions
from workflow_engine.core.workflow.results import WorkflowError
from workflow_engine.core.workflow.service import WorkflowService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-engine",
        description="Validate and run finite-state workflow definitions",
    )
    parser.add_argument("--version", action="version", version=f"workflow-engine {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate workflow definition files")
    validate.add_argument("files", nargs="+", type=Path, help="Definition JSON files")

    run = subparsers.add_parser(
        "run",
        help="Start an instance of a definition and execute actions in order",
    )
    run.add_argument("file", type=Path, help="Definition JSON file")
    run.add_argument(
        "--action",
        "-a",
        dest="actions",
        action="append",
        default=[],
        help="Action id to execute (repeatable, executed in the given order)",
    )

    return parser


def _load_and_register(service: WorkflowService, path: Path) -> str:
    """Register the definition at ``path``; returns its id.

    Raises:
        WorkflowError: the definition failed structural validation.
        ValueError: the file is not a readable definition.
    """

    try:
        definition = load_definition_file(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"cannot read definition: {e}") from e
    service.register_definition(definition).unwrap()
    return definition.id


def _validate(service: WorkflowService, files: list[Path]) -> int:
    failures = 0
    for path in files:
        try:
            definition_id = _load_and_register(service, path)
        except (WorkflowError, ValueError) as e:
            failures += 1
            print(f"FAIL {path}: {e}")
            continue
        print(f"OK {definition_id}")
    return 1 if failures else 0


def _run(service: WorkflowService, path: Path, actions: list[str]) -> int:
    try:
        definition_id = _load_and_register(service, path)
        instance = service.start_instance(definition_id).unwrap()
    except (WorkflowError, ValueError) as e:
        print(f"FAIL {path}: {e}")
        return 1
    assert instance is not None

    print(f"Instance {instance.id}")
    print(instance.history[-1].describe())

    for action_id in actions:
        try:
            instance = service.execute_action(instance.id, action_id).unwrap()
        except WorkflowError as e:
            print(f"FAIL {action_id}: {e}")
            return 1
        assert instance is not None
        print(instance.history[-1].describe())

    print(f"Current state: {instance.current_state_id}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = EngineSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level, stream=sys.stderr)

    service = WorkflowService()
    if settings.definitions_path is not None:
        preload_definitions(service, settings.definitions_path)

    if args.command == "validate":
        return _validate(service, args.files)
    if args.command == "run":
        return _run(service, args.file, args.actions)

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
