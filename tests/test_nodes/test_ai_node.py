"""Tests for the AI node and the other built-in nodes."""

import json

import httpx
import pytest

from flowexec.core.errors import MissingCredentialError, NodeValidationError
from flowexec.models.node import NodeCategory
from flowexec.models.workflow import WorkflowNode
from flowexec.nodes.apis.ai import AINode
from flowexec.nodes.logic.condition import ConditionNode
from flowexec.nodes.logic.loop import LoopNode
from flowexec.nodes.registry import NodeRegistry, NodeRegistryError, get_node_registry
from flowexec.nodes.trigger import TriggerNode
from flowexec.providers.dispatch import ProviderDispatcher


class TestAINode:
    """Tests for AINode."""

    @pytest.mark.asyncio
    async def test_prompt_is_interpolated_and_sent(self, context, mock_client, test_settings):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["payload"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"choices": [{"message": {"content": "Hi Ada"}}], "usage": {"total_tokens": 9}},
            )

        client = mock_client(handler)
        context.http_client = client
        context.providers = ProviderDispatcher(
            {"deepseek": "sk-ds"}, settings=test_settings, http_client=client
        )

        node = WorkflowNode(
            id="ai",
            type="ai",
            data={
                "provider": "deepseek",
                "operation": "generate",
                "prompt": "Greet {{input.name}}",
                "maxTokens": 64,
                "temperature": 0,
            },
        )
        output = await AINode().run(node, context)

        assert output == {"text": "Hi Ada", "usage": {"total_tokens": 9}}
        assert seen["url"] == "https://api.deepseek.com/v1/chat/completions"
        assert seen["payload"]["model"] == "deepseek-chat"
        assert seen["payload"]["max_tokens"] == 64
        assert seen["payload"]["temperature"] == 0
        assert seen["payload"]["messages"] == [{"role": "user", "content": "Greet Ada"}]

    @pytest.mark.asyncio
    async def test_missing_credential(self, context, test_settings):
        context.providers = ProviderDispatcher(settings=test_settings)
        node = WorkflowNode(id="ai", type="ai", data={"provider": "openai", "prompt": "x"})

        with pytest.raises(MissingCredentialError) as exc_info:
            await AINode().run(node, context)

        assert str(exc_info.value) == "OpenAI API key not configured"

    @pytest.mark.parametrize(
        "data, field",
        [
            ({"prompt": "x"}, "provider"),
            ({"provider": "claude"}, "prompt"),
            ({"provider": "claude", "prompt": 3}, "prompt"),
            ({"provider": "claude", "prompt": "x", "operation": "dance"}, "operation"),
            ({"provider": "claude", "prompt": "x", "temperature": 3}, "temperature"),
            ({"provider": "claude", "prompt": "x", "maxTokens": -1}, "maxTokens"),
            ({"provider": "claude", "prompt": "x", "maxTokens": 1.5}, "maxTokens"),
        ],
    )
    def test_validation(self, data, field):
        with pytest.raises(NodeValidationError) as exc_info:
            AINode().validate_data(data)
        assert exc_info.value.field == field

    def test_snake_case_max_tokens(self):
        data = AINode().validate_data({"provider": "claude", "prompt": "x", "max_tokens": 10.0})
        assert data.max_tokens == 10


class TestLogicNodes:
    """Tests for trigger, condition and loop nodes."""

    @pytest.mark.asyncio
    async def test_condition_coerces_to_bool(self, context):
        node = WorkflowNode(id="c", type="condition", data={"expression": "input.name"})
        assert await ConditionNode().run(node, context) == {"condition": True}

    @pytest.mark.asyncio
    async def test_unresolvable_condition_is_false(self, context):
        node = WorkflowNode(id="c", type="condition", data={"expression": "nothing.here"})
        assert await ConditionNode().run(node, context) == {"condition": False}

    @pytest.mark.asyncio
    async def test_empty_collections_are_true(self, context):
        context.variables["input"] = {"items": [], "meta": {}}

        for expression in ("input.items", "input.meta"):
            node = WorkflowNode(id="c", type="condition", data={"expression": expression})
            assert await ConditionNode().run(node, context) == {"condition": True}

    @pytest.mark.asyncio
    async def test_loop_is_a_marker(self, context):
        node = WorkflowNode(id="l", type="loop", data={"arrayPath": "input.tags"})
        assert await LoopNode().run(node, context) == {"loop": True}

    @pytest.mark.asyncio
    async def test_trigger_ignores_unknown_kind(self, context):
        node = WorkflowNode(id="t", type="webhook", data={"triggerKind": "carrier-pigeon"})
        assert await TriggerNode().run(node, context) == context.variables["input"]


class TestNodeRegistry:
    """Tests for NodeRegistry."""

    def test_load_builtin_nodes(self):
        registry = NodeRegistry()
        assert registry.load_builtin_nodes() == 6
        assert registry.list_types() == [
            "ai",
            "condition",
            "http",
            "loop",
            "schedule",
            "transform",
            "trigger",
            "webhook",
        ]

    def test_trigger_types_share_one_executor(self):
        registry = get_node_registry()
        assert registry.get("trigger") is registry.get("webhook") is registry.get("schedule")

    def test_duplicate_registration_raises_error(self):
        registry = NodeRegistry()
        registry.register(TriggerNode)
        with pytest.raises(NodeRegistryError):
            registry.register(TriggerNode)

    def test_catalog(self):
        catalog = get_node_registry().get_catalog()

        assert catalog["total_count"] == 6
        assert [d["name"] for d in catalog["categories"]["trigger"]] == ["trigger"]
        assert {d["name"] for d in catalog["categories"]["logic"]} == {"condition", "loop"}

    def test_list_by_category(self):
        actions = get_node_registry().list_by_category(NodeCategory.ACTION)
        assert {d.name for d in actions} == {"ai", "http_request", "transform"}
