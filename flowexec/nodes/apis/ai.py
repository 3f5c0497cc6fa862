"""AI node.

Interpolates a prompt template and sends it to the configured provider.
"""

from dataclasses import dataclass
from typing import Any, Literal

from flowexec.core.errors import NodeValidationError
from flowexec.core.expressions import interpolate_string
from flowexec.models.execution import ExecutionContext
from flowexec.models.node import NodeCategory, NodeDefinition
from flowexec.nodes.base import BaseNode, pick
from flowexec.providers.base import CompletionConfig
from flowexec.providers.dispatch import ProviderDispatcher

Operation = Literal["generate", "analyze", "extract", "summarize", "translate"]

OPERATIONS = ("generate", "analyze", "extract", "summarize", "translate")


@dataclass
class AIInput:
    """Input for AI node."""

    provider: str
    prompt: str
    model: str | None = None
    operation: Operation = "generate"
    temperature: float | None = None
    max_tokens: int | None = None


class AINode(BaseNode[AIInput]):
    """AI node for text generation.

    The provider is picked at run time from ``data.provider``; API keys come
    from the run's credential map or settings.

    Example node data:
        {
            "provider": "claude",
            "model": "claude-3-5-sonnet-20241022",
            "operation": "summarize",
            "prompt": "Summarize: {{nodeOutputs.fetch.body}}",
            "maxTokens": 512
        }
    """

    def get_definition(self) -> NodeDefinition:
        """Get node definition."""
        return NodeDefinition(
            name="ai",
            display_name="AI Process",
            description="Generate text with Claude, OpenAI, DeepSeek or Zhipu models",
            category=NodeCategory.ACTION,
            node_types=("ai",),
            fields=["provider", "model", "operation", "prompt", "temperature", "maxTokens"],
        )

    def validate_data(self, data: dict[str, Any]) -> AIInput:
        """Validate input data."""
        provider = data.get("provider")
        prompt = data.get("prompt")

        if not provider or not isinstance(provider, str):
            raise NodeValidationError("Provider is required", field="provider")

        if not prompt:
            raise NodeValidationError("Prompt is required", field="prompt")

        if not isinstance(prompt, str):
            raise NodeValidationError("Prompt must be a string", field="prompt")

        operation = data.get("operation") or "generate"
        if operation not in OPERATIONS:
            raise NodeValidationError(
                f"Operation must be one of {', '.join(OPERATIONS)}", field="operation"
            )

        temperature = data.get("temperature")
        if temperature is not None:
            if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
                raise NodeValidationError("Temperature must be a number", field="temperature")
            if not 0 <= temperature <= 2:
                raise NodeValidationError(
                    "Temperature must be between 0 and 2", field="temperature"
                )

        max_tokens = pick(data, "maxTokens", "max_tokens")
        if max_tokens is not None:
            if isinstance(max_tokens, bool) or not isinstance(max_tokens, (int, float)):
                raise NodeValidationError("Max tokens must be a number", field="maxTokens")
            if max_tokens < 0 or int(max_tokens) != max_tokens:
                raise NodeValidationError(
                    "Max tokens must be a non-negative integer", field="maxTokens"
                )
            max_tokens = int(max_tokens)

        return AIInput(
            provider=provider,
            prompt=prompt,
            model=data.get("model") or None,
            operation=operation,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    async def execute(self, data: AIInput, context: ExecutionContext) -> dict[str, Any]:
        """Interpolate the prompt and call the provider."""
        prompt = interpolate_string(data.prompt, context)
        dispatcher = context.providers or ProviderDispatcher(http_client=context.http_client)

        result = await dispatcher.complete(
            data.provider,
            prompt,
            CompletionConfig(
                model=data.model,
                max_tokens=data.max_tokens,
                temperature=data.temperature,
            ),
        )
        return result.to_dict()
