#!/usr/bin/env python3
"""
Run a workflow file locally.

The file holds ``{"nodes": [...], "edges": [...], "input": ...}`` as exported
by the workflow editor. Provider keys are read from the environment.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import structlog

from flowexec.config import get_settings
from flowexec.core.execution_engine import WorkflowExecutor
from flowexec.logging_config import configure_logging
from flowexec.models.execution import ExecutionResult
from flowexec.models.workflow import WorkflowGraph

logger = structlog.get_logger()


def load_workflow(path: Path) -> dict[str, Any]:
    """Load and sanity-check a workflow file.

    Args:
        path: JSON file with nodes, edges and optional input

    Returns:
        Parsed workflow document

    Raises:
        ValueError: If the document is not a valid workflow graph
    """
    document = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(document, dict) or "nodes" not in document:
        raise ValueError(f"{path} does not contain a 'nodes' list")
    WorkflowGraph.model_validate(document)
    return document


async def run_workflow(
    document: dict[str, Any],
    input_data: Any = None,
    enforce_condition_branches: bool | None = None,
) -> ExecutionResult:
    """Execute a loaded workflow document.

    Args:
        document: Workflow document
        input_data: Run input; overrides the document's own ``input``
        enforce_condition_branches: Override the branch-filtering setting

    Returns:
        Execution result
    """
    executor = WorkflowExecutor(enforce_condition_branches=enforce_condition_branches)
    return await executor.execute(
        document.get("nodes", []),
        document.get("edges", []),
        input_data if input_data is not None else document.get("input"),
        workflow_id=str(document.get("id", "")),
    )


async def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Execute a workflow JSON file")
    parser.add_argument("workflow", type=Path, help="Path to the workflow JSON file")
    parser.add_argument("--input", dest="input_json", help="Run input as a JSON string")
    parser.add_argument(
        "--enforce-branches",
        action="store_true",
        default=None,
        help="Only follow the condition branch matching the evaluated result",
    )

    args = parser.parse_args()
    configure_logging(get_settings(), file=sys.stderr)

    try:
        document = load_workflow(args.workflow)
        input_data = json.loads(args.input_json) if args.input_json else None
    except (OSError, ValueError) as e:
        logger.error("workflow_load_failed", path=str(args.workflow), error=str(e))
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(2)

    result = await run_workflow(document, input_data, args.enforce_branches)

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str))

    if result.success:
        sys.exit(0)
    print(f"✗ Workflow failed: {result.error}", file=sys.stderr)
    sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
