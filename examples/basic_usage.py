#!/usr/bin/env python3
"""Programmatic workflow example.

This demonstrates using the workflow service directly:

* load a definition from a JSON file
* register it and start an instance
* execute actions and print the resulting history

Actions are passed as arguments and executed in order.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from workflow_engine import WorkflowService
from workflow_engine.core.logging import configure_logging
from workflow_engine.core.workflow.loader import load_definition_file


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Drive a workflow instance (programmatic example)."
    )
    parser.add_argument(
        "--definition",
        type=Path,
        default=Path(__file__).parent / "definitions" / "document-review.json",
        help="Workflow definition JSON file",
    )
    parser.add_argument(
        "--actions",
        default="Submit,Approve",
        help='Comma-separated action ids, e.g. "Submit,Revise,Submit"',
    )
    parser.add_argument("--log-level", default="WARNING", help="Root logging level")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)

    service = WorkflowService()
    definition = load_definition_file(args.definition)

    registered = service.register_definition(definition)
    if registered.failure is not None:
        print(f"Definition rejected: {registered.failure.message}")
        return 1

    started = service.start_instance(definition.id)
    if started.value is None:
        print(f"Could not start: {started.failure}")
        return 1
    instance = started.value

    for action_id in [a.strip() for a in args.actions.split(",") if a.strip()]:
        print(f"Available: {[a.id for a in service.get_available_actions(instance.id)]}")
        result = service.execute_action(instance.id, action_id)
        if result.failure is not None:
            print(f"{action_id} refused ({result.failure.reason.value}): {result.failure.message}")
            break

    final = service.get_instance(instance.id)
    assert final is not None
    for entry in final.history:
        print(entry.describe())
    print(f"Current state: {final.current_state_id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
