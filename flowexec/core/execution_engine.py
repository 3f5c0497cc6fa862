"""Workflow execution engine.

Runs a workflow graph from its trigger node, one node at a time, and
assembles per-node and overall results. Supports streaming progress events.
"""

import asyncio
import json
import time
from collections.abc import Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, AsyncGenerator, AsyncIterator
from uuid import uuid4

import httpx
import structlog

from flowexec.config import Settings, get_settings
from flowexec.core.errors import (
    ExecutionError,
    ExecutionTimeoutError,
    NodeTimeoutError,
    UnknownNodeTypeError,
)
from flowexec.core.graph import find_trigger_node, iter_execution_order
from flowexec.models.execution import (
    ExecutionContext,
    ExecutionResult,
    NodeResult,
    utc_now,
)
from flowexec.models.workflow import WorkflowEdge, WorkflowNode, parse_edges, parse_nodes
from flowexec.nodes.registry import NodeRegistry, get_node_registry
from flowexec.providers.dispatch import ProviderDispatcher

logger = structlog.get_logger()


def _elapsed_ms(since: float) -> int:
    return int((time.perf_counter() - since) * 1000)


@dataclass
class ExecutionEvent:
    """Event emitted during workflow execution."""

    type: str  # 'start', 'step', 'complete', 'error'
    timestamp: datetime = field(default_factory=utc_now)
    data: dict[str, Any] = field(default_factory=dict)
    trace_id: str | None = None
    node_id: str | None = None
    step_number: int | None = None
    result: ExecutionResult | None = field(default=None, repr=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for SSE streaming."""
        return {
            "type": self.type,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
            "trace_id": self.trace_id,
            "node_id": self.node_id,
            "step_number": self.step_number,
        }

    def to_sse(self) -> str:
        """Format as Server-Sent Event."""
        return f"data: {json.dumps(self.to_dict(), default=str)}\n\n"


class WorkflowExecutor:
    """Sequential workflow executor.

    Each call to ``execute``/``stream`` builds its own context (and, unless
    one was injected, its own HTTP client), so concurrent runs share no
    mutable state.

    Example usage:
        executor = WorkflowExecutor({"claude": "sk-ant-..."})
        result = await executor.execute(nodes, edges, {"topic": "cats"})
        print(result.to_dict())
    """

    def __init__(
        self,
        api_keys: Mapping[str, str] | None = None,
        *,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        registry: NodeRegistry | None = None,
        enforce_condition_branches: bool | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            api_keys: Provider API keys (claude, openai, deepseek, zhipu);
                missing keys fall back to settings
            settings: Settings (defaults to the cached environment settings)
            http_client: Shared HTTP client; when omitted each run opens its own
            registry: Node registry (defaults to the built-in nodes)
            enforce_condition_branches: Only follow the condition branch that
                matches the evaluated result (defaults to
                settings.enforce_condition_branches)
        """
        self.api_keys = dict(api_keys or {})
        self.settings = settings or get_settings()
        self.registry = registry or get_node_registry()
        self.enforce_condition_branches = (
            enforce_condition_branches
            if enforce_condition_branches is not None
            else self.settings.enforce_condition_branches
        )
        self._http_client = http_client

    async def execute(
        self,
        nodes: Sequence[WorkflowNode | dict[str, Any]],
        edges: Sequence[WorkflowEdge | dict[str, Any]],
        input_data: Any = None,
        workflow_id: str = "",
    ) -> ExecutionResult:
        """Execute a workflow to completion.

        Never raises for a workflow failure: the result carries the error
        and the node results gathered before the failure.

        Args:
            nodes: Workflow nodes (models or camelCase dicts)
            edges: Workflow edges (models or camelCase dicts)
            input_data: Run input, exposed as ``input``
            workflow_id: Identifier of the workflow, for logging

        Returns:
            ExecutionResult
        """
        result: ExecutionResult | None = None
        async for event in self.stream(nodes, edges, input_data, workflow_id):
            if event.result is not None:
                result = event.result
        if result is None:
            raise RuntimeError("Execution stream ended without a result")
        return result

    async def stream(
        self,
        nodes: Sequence[WorkflowNode | dict[str, Any]],
        edges: Sequence[WorkflowEdge | dict[str, Any]],
        input_data: Any = None,
        workflow_id: str = "",
    ) -> AsyncGenerator[ExecutionEvent, None]:
        """Execute a workflow, yielding an event per step.

        Yields a ``start`` event, a ``step`` event for every visited node
        and finally ``complete`` or ``error``; the last event carries the
        ExecutionResult.
        """
        execution_id = f"exec-{uuid4().hex}"
        started = time.perf_counter()
        node_results: dict[str, NodeResult] = {}

        logger.info(
            "execution_starting",
            workflow_id=workflow_id,
            execution_id=execution_id,
            node_count=len(nodes),
            edge_count=len(edges),
        )

        yield ExecutionEvent(
            type="start",
            trace_id=execution_id,
            data={"workflow_id": workflow_id, "input_data": input_data},
        )

        async with self._client_scope() as client:
            context = ExecutionContext(
                workflow_id=workflow_id,
                execution_id=execution_id,
                variables={"input": input_data},
                http_client=client,
                providers=ProviderDispatcher(
                    self.api_keys,
                    settings=self.settings,
                    http_client=client,
                ),
            )

            try:
                node_list = parse_nodes(list(nodes))
                edge_list = parse_edges(list(edges))
                trigger = find_trigger_node(node_list)

                node_map: dict[str, WorkflowNode] = {}
                for node in node_list:
                    node_map.setdefault(node.id, node)

                def select_branch(node_id: str) -> str | None:
                    if not self.enforce_condition_branches:
                        return None
                    node = node_map.get(node_id)
                    output = context.node_outputs.get(node_id)
                    if node is None or node.type != "condition" or not isinstance(output, dict):
                        return None
                    return "true" if output.get("condition") else "false"

                deadline = started + self.settings.execution_timeout
                last_node_id: str | None = None
                step = 0

                for node_id in iter_execution_order(edge_list, trigger.id, select_branch):
                    node = node_map.get(node_id)
                    if node is None:
                        logger.warning(
                            "edge_target_not_found",
                            node_id=node_id,
                            execution_id=execution_id,
                        )
                        continue

                    last_node_id = node_id

                    step += 1
                    node_started = time.perf_counter()
                    try:
                        output = await self._execute_node(node, context, deadline)
                    except Exception as e:
                        node_results[node_id] = NodeResult(
                            node_id=node_id,
                            node_type=node.type,
                            success=False,
                            duration=_elapsed_ms(node_started),
                            error=str(e),
                            error_code=getattr(e, "error_code", "EXECUTION_ERROR"),
                        )
                        yield ExecutionEvent(
                            type="step",
                            trace_id=execution_id,
                            node_id=node_id,
                            step_number=step,
                            data=node_results[node_id].to_dict(),
                        )
                        raise

                    context.node_outputs[node_id] = output
                    node_results[node_id] = NodeResult(
                        node_id=node_id,
                        node_type=node.type,
                        success=True,
                        duration=_elapsed_ms(node_started),
                        output=output,
                    )
                    yield ExecutionEvent(
                        type="step",
                        trace_id=execution_id,
                        node_id=node_id,
                        step_number=step,
                        data=node_results[node_id].to_dict(),
                    )

                result = ExecutionResult(
                    execution_id=execution_id,
                    success=True,
                    duration=_elapsed_ms(started),
                    output=(
                        context.node_outputs.get(last_node_id)
                        if last_node_id is not None
                        else None
                    ),
                    node_results=node_results,
                )

                logger.info(
                    "execution_completed",
                    workflow_id=workflow_id,
                    execution_id=execution_id,
                    steps=step,
                    duration_ms=result.duration,
                )

                yield ExecutionEvent(
                    type="complete",
                    trace_id=execution_id,
                    step_number=step,
                    data=result.to_dict(),
                    result=result,
                )

            except Exception as e:
                error_code = getattr(e, "error_code", "EXECUTION_ERROR")
                if isinstance(e, ExecutionError):
                    logger.warning(
                        "execution_failed",
                        workflow_id=workflow_id,
                        execution_id=execution_id,
                        error_code=error_code,
                        error=str(e),
                    )
                else:
                    logger.exception(
                        "execution_failed",
                        workflow_id=workflow_id,
                        execution_id=execution_id,
                        error_type=type(e).__name__,
                    )

                result = ExecutionResult(
                    execution_id=execution_id,
                    success=False,
                    duration=_elapsed_ms(started),
                    error=str(e),
                    error_code=error_code,
                    node_results=node_results,
                )

                yield ExecutionEvent(
                    type="error",
                    trace_id=execution_id,
                    data=result.to_dict(),
                    result=result,
                )

    async def _execute_node(
        self,
        node: WorkflowNode,
        context: ExecutionContext,
        deadline: float,
    ) -> Any:
        """Run one node under the node timeout and the run deadline."""
        executor = self.registry.get(node.type)
        if executor is None:
            raise UnknownNodeTypeError(node.type)

        remaining = deadline - time.perf_counter()
        if remaining <= 0:
            raise ExecutionTimeoutError(self.settings.execution_timeout)

        timeout = min(self.settings.node_timeout, remaining)
        try:
            return await asyncio.wait_for(executor.run(node, context), timeout=timeout)
        except asyncio.TimeoutError:
            if timeout < self.settings.node_timeout:
                raise ExecutionTimeoutError(self.settings.execution_timeout) from None
            raise NodeTimeoutError(node.id, timeout) from None

    @asynccontextmanager
    async def _client_scope(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
        else:
            async with httpx.AsyncClient(timeout=self.settings.http_timeout) as client:
                yield client
