"""Tests for the workflow execution engine."""

import asyncio
import json
import time
from typing import Any

import httpx
import pytest
from conftest import edge, node, trigger

from flowexec.core.execution_engine import WorkflowExecutor
from flowexec.models.execution import ExecutionContext
from flowexec.models.node import NodeCategory, NodeDefinition
from flowexec.nodes.base import BaseNode
from flowexec.nodes.registry import NodeRegistry


class SlowNode(BaseNode[dict]):
    """Node that sleeps for ``data.seconds``."""

    def get_definition(self) -> NodeDefinition:
        return NodeDefinition(
            name="slow",
            display_name="Slow",
            description="Sleeps",
            category=NodeCategory.ACTION,
            node_types=("slow",),
        )

    async def execute(self, data: dict, context: ExecutionContext) -> Any:
        await asyncio.sleep(data.get("seconds", 1))
        return "done"


def slow_registry() -> NodeRegistry:
    registry = NodeRegistry()
    registry.load_builtin_nodes()
    registry.register(SlowNode)
    return registry


def branching_workflow() -> tuple[list[dict], list[dict]]:
    nodes = [
        trigger("t1"),
        node("check", "condition", expression="input.score > 60"),
        node("pass", "transform", expression="'pass'"),
        node("fail", "transform", expression="'fail'"),
    ]
    edges = [
        edge("t1", "check"),
        edge("check", "pass", "true"),
        edge("check", "fail", "false"),
    ]
    return nodes, edges


class TestExecute:
    """Tests for WorkflowExecutor.execute."""

    @pytest.mark.asyncio
    async def test_no_trigger(self, make_executor):
        result = await make_executor().execute([], [], {})

        assert result.success is False
        assert result.error == "No trigger node found"
        assert result.error_code == "NO_TRIGGER_NODE"
        assert result.node_results == {}
        assert result.execution_id.startswith("exec-")

    @pytest.mark.asyncio
    async def test_trigger_passes_input_through(self, make_executor):
        result = await make_executor().execute([trigger()], [], {"x": 1})

        assert result.success is True
        assert result.output == {"x": 1}
        assert result.node_results["t1"].success is True
        assert result.node_results["t1"].node_type == "trigger"

    @pytest.mark.asyncio
    async def test_trigger_without_input_outputs_empty_object(self, make_executor):
        result = await make_executor().execute([node("s", "schedule", schedule="0 * * * *")], [])

        assert result.success is True
        assert result.output == {}

    @pytest.mark.asyncio
    async def test_output_is_last_node_output(self, make_executor):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == "https://api.example.com/users/7"
            return httpx.Response(200, json={"items": [{"id": 1}, {"id": 2}]})

        nodes = [
            trigger(),
            node("fetch", "http", url="https://api.example.com/users/{{input.id}}"),
            node("count", "transform", expression="nodeOutputs.fetch.items.length"),
        ]
        edges = [edge("t1", "fetch"), edge("fetch", "count")]

        result = await make_executor(handler).execute(nodes, edges, {"id": 7})

        assert result.success is True
        assert result.output == 2
        assert list(result.node_results) == ["t1", "fetch", "count"]
        assert result.node_results["fetch"].output == {"items": [{"id": 1}, {"id": 2}]}

    @pytest.mark.asyncio
    async def test_failure_aborts_run(self, make_executor):
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.host)
            return httpx.Response(500, text="boom")

        nodes = [
            trigger(),
            node("http", "http", url="https://api.example.com/fail"),
            node("ai", "ai", provider="claude", prompt="hi"),
        ]
        edges = [edge("t1", "http"), edge("http", "ai")]

        result = await make_executor(handler, {"claude": "sk-test"}).execute(nodes, edges, {})

        assert result.success is False
        assert result.error == "HTTP 500: Internal Server Error"
        assert result.error_code == "HTTP_STATUS_ERROR"
        assert list(result.node_results) == ["t1", "http"]
        assert result.node_results["t1"].success is True
        assert result.node_results["http"].success is False
        assert result.node_results["http"].error_code == "HTTP_STATUS_ERROR"
        assert "ai" not in result.node_results
        assert calls == ["api.example.com"]

    @pytest.mark.asyncio
    async def test_unknown_node_type(self, make_executor):
        nodes = [trigger(), node("m", "mystery")]
        result = await make_executor().execute(nodes, [edge("t1", "m")])

        assert result.success is False
        assert result.error == "Unknown node type: mystery"
        assert result.node_results["m"].error_code == "UNKNOWN_NODE_TYPE"
        assert result.node_results["m"].node_type == "mystery"

    @pytest.mark.asyncio
    async def test_validation_error_fails_node(self, make_executor):
        nodes = [trigger(), node("c", "condition")]
        result = await make_executor().execute(nodes, [edge("t1", "c")])

        assert result.success is False
        assert result.error == "Expression is required"
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_dangling_edge_is_skipped(self, make_executor):
        nodes = [trigger(), node("x", "transform", expression="input.a")]
        edges = [edge("t1", "ghost"), edge("t1", "x")]

        result = await make_executor().execute(nodes, edges, {"a": 5})

        assert result.success is True
        assert list(result.node_results) == ["t1", "x"]
        assert result.output == 5

    @pytest.mark.asyncio
    async def test_both_branches_run_by_default(self, make_executor):
        nodes, edges = branching_workflow()
        result = await make_executor().execute(nodes, edges, {"score": 75})

        assert result.success is True
        assert result.node_results["check"].output == {"condition": True}
        assert list(result.node_results) == ["t1", "check", "pass", "fail"]
        assert result.output == "fail"

    @pytest.mark.asyncio
    async def test_enforced_branches_skip_untaken_side(self, make_executor):
        nodes, edges = branching_workflow()
        executor = make_executor(enforce_condition_branches=True)

        passed = await executor.execute(nodes, edges, {"score": 75})
        failed = await executor.execute(nodes, edges, {"score": 10})

        assert list(passed.node_results) == ["t1", "check", "pass"]
        assert passed.output == "pass"
        assert list(failed.node_results) == ["t1", "check", "fail"]
        assert failed.output == "fail"

    @pytest.mark.asyncio
    async def test_node_timeout(self, test_settings):
        settings = test_settings.model_copy(update={"node_timeout": 0.05})
        executor = WorkflowExecutor(settings=settings, registry=slow_registry())

        nodes = [trigger(), node("z", "slow", seconds=5)]
        result = await executor.execute(nodes, [edge("t1", "z")])

        assert result.success is False
        assert result.error_code == "NODE_TIMEOUT"
        assert result.node_results["z"].success is False

    @pytest.mark.asyncio
    async def test_execution_timeout(self, test_settings):
        settings = test_settings.model_copy(update={"execution_timeout": 0.05})
        executor = WorkflowExecutor(settings=settings, registry=slow_registry())

        nodes = [trigger(), node("z", "slow", seconds=5)]
        result = await executor.execute(nodes, [edge("t1", "z")])

        assert result.success is False
        assert result.error_code == "EXECUTION_TIMEOUT"
        assert result.node_results["z"].error_code == "EXECUTION_TIMEOUT"

    @pytest.mark.asyncio
    async def test_dangling_target_last_in_order(self, make_executor):
        nodes = [trigger(), node("x", "transform", expression="input.a")]
        edges = [edge("t1", "x"), edge("x", "ghost")]

        result = await make_executor().execute(nodes, edges, {"a": 5})

        assert result.success is True
        assert list(result.node_results) == ["t1", "x"]
        assert result.output == 5

    @pytest.mark.asyncio
    async def test_oversized_power_is_rejected_quickly(self, make_executor):
        nodes = [trigger(), node("x", "transform", expression="((10 ** 1000) ** 1000) ** 40")]
        started = time.perf_counter()

        result = await make_executor(node_timeout=0.5).execute(nodes, [edge("t1", "x")])

        assert time.perf_counter() - started < 0.5
        assert result.success is True
        assert result.output is None
        json.dumps(result.to_dict())

    @pytest.mark.asyncio
    async def test_empty_list_takes_true_branch(self, make_executor):
        nodes, edges = branching_workflow()
        nodes[1] = node("check", "condition", expression="input.items")

        result = await make_executor(enforce_condition_branches=True).execute(
            nodes, edges, {"items": []}
        )

        assert result.node_results["check"].output == {"condition": True}
        assert list(result.node_results) == ["t1", "check", "pass"]

    @pytest.mark.asyncio
    async def test_missing_result_raises(self, make_executor):
        class SilentExecutor(WorkflowExecutor):
            async def stream(self, *args, **kwargs):
                return
                yield

        executor = SilentExecutor(settings=make_executor().settings)

        with pytest.raises(RuntimeError):
            await executor.execute([trigger()], [])

    @pytest.mark.asyncio
    async def test_concurrent_runs_are_isolated(self, make_executor):
        executor = make_executor()
        nodes = [trigger(), node("x", "transform", expression="input.n * 10")]
        edges = [edge("t1", "x")]

        results = await asyncio.gather(
            *(executor.execute(nodes, edges, {"n": n}) for n in range(5))
        )

        assert [r.output for r in results] == [0, 10, 20, 30, 40]
        assert len({r.execution_id for r in results}) == 5

    @pytest.mark.asyncio
    async def test_result_to_dict(self, make_executor):
        result = await make_executor().execute([trigger()], [], {"x": 1})
        data = result.to_dict()

        assert data["success"] is True
        assert data["output"] == {"x": 1}
        assert data["nodeResults"]["t1"]["nodeId"] == "t1"
        assert "error" not in data
        json.dumps(data)


class TestStream:
    """Tests for WorkflowExecutor.stream."""

    @pytest.mark.asyncio
    async def test_event_sequence(self, make_executor):
        nodes = [trigger(), node("x", "transform", expression="input.a + 1")]
        events = [
            e async for e in make_executor().stream(nodes, [edge("t1", "x")], {"a": 1})
        ]

        assert [e.type for e in events] == ["start", "step", "step", "complete"]
        assert [e.step_number for e in events[1:3]] == [1, 2]
        assert events[2].node_id == "x"
        assert events[-1].result is not None
        assert events[-1].result.output == 2
        assert len({e.trace_id for e in events}) == 1

    @pytest.mark.asyncio
    async def test_error_event_last(self, make_executor):
        events = [e async for e in make_executor().stream([], [])]

        assert [e.type for e in events] == ["start", "error"]
        assert events[-1].data["errorCode"] == "NO_TRIGGER_NODE"
        assert events[-1].to_sse().startswith("data: ")
