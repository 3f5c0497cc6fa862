"""Provider capability shared by every AI backend.

A provider is described by a ``ProviderSpec`` entry in the dispatch table
rather than by a subclass: each entry knows where to send a chat request,
how to authenticate it and how to normalise the reply.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

DEFAULT_MAX_TOKENS = 1024
DEFAULT_TEMPERATURE = 0.7


@dataclass
class CompletionConfig:
    """Per-call generation settings taken from an AI node."""

    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None


@dataclass
class CompletionResult:
    """Normalised provider reply."""

    text: str
    usage: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the node output shape."""
        return {"text": self.text, "usage": self.usage}


@dataclass(frozen=True)
class ProviderSpec:
    """Everything needed to call one chat-completion backend.

    ``api_key_setting`` and ``base_url_setting`` name fields on
    ``flowexec.config.Settings``.
    """

    name: str
    display_name: str
    default_model: str
    api_key_setting: str
    base_url_setting: str
    path: str
    build_headers: Callable[[str, Any], dict[str, str]]
    parse_response: Callable[[dict[str, Any]], CompletionResult]

    def build_payload(self, prompt: str, config: CompletionConfig) -> dict[str, Any]:
        """Build the JSON request body shared by all providers."""
        return {
            "model": config.model or self.default_model,
            "max_tokens": config.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": (
                config.temperature if config.temperature is not None else DEFAULT_TEMPERATURE
            ),
            "messages": [{"role": "user", "content": prompt}],
        }
