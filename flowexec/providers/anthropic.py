"""Anthropic Claude provider.

Calls the Messages API; the reply text is the first content block.
"""

from typing import Any

from flowexec.config import Settings
from flowexec.providers.base import CompletionResult, ProviderSpec


def build_headers(api_key: str, settings: Settings) -> dict[str, str]:
    """Claude authenticates with ``x-api-key`` and a pinned API version."""
    return {
        "x-api-key": api_key,
        "anthropic-version": settings.anthropic_version,
        "Content-Type": "application/json",
    }


def parse_response(data: dict[str, Any]) -> CompletionResult:
    """Extract ``content[0].text``."""
    content = data.get("content") or []
    first = content[0] if content and isinstance(content[0], dict) else {}
    return CompletionResult(
        text=first.get("text") or "",
        usage=data.get("usage") or {},
    )


CLAUDE = ProviderSpec(
    name="claude",
    display_name="Claude",
    default_model="claude-3-5-sonnet-20241022",
    api_key_setting="anthropic_api_key",
    base_url_setting="anthropic_base_url",
    path="/messages",
    build_headers=build_headers,
    parse_response=parse_response,
)
