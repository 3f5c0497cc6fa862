"""Execution API endpoints.

Runs workflow graphs supplied by the caller, optionally streaming
progress as Server-Sent Events. Results are returned, not stored.
"""

import json
from typing import Any, AsyncGenerator

import structlog
from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse

from flowexec.api.deps import ExecutorDep
from flowexec.models.execution import ExecutionCreate

logger = structlog.get_logger()

router = APIRouter()


@router.post("", response_model=dict[str, Any])
async def create_execution(
    executor: ExecutorDep,
    data: ExecutionCreate,
) -> dict[str, Any]:
    """Run a workflow graph to completion.

    A failed run is still a 200 response; ``success`` and ``error`` in the
    body describe the outcome.

    Args:
        executor: Workflow executor
        data: Nodes, edges and run input

    Returns:
        ExecutionResult as JSON
    """
    logger.info(
        "execution_requested",
        workflow_id=data.workflow_id,
        node_count=len(data.nodes),
    )

    result = await executor.execute(
        data.nodes,
        data.edges,
        data.input,
        workflow_id=data.workflow_id,
    )
    return result.to_dict()


@router.post("/stream")
async def stream_execution(
    executor: ExecutorDep,
    data: ExecutionCreate,
) -> EventSourceResponse:
    """Run a workflow graph, streaming one event per step.

    Args:
        executor: Workflow executor
        data: Nodes, edges and run input

    Returns:
        SSE stream of start/step/complete/error events
    """

    async def event_generator() -> AsyncGenerator[dict[str, str], None]:
        async for event in executor.stream(
            data.nodes,
            data.edges,
            data.input,
            workflow_id=data.workflow_id,
        ):
            yield {
                "event": event.type,
                "data": json.dumps(event.to_dict(), default=str),
            }

    return EventSourceResponse(event_generator())
