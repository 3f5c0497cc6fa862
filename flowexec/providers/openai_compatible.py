"""OpenAI-compatible chat-completion providers.

OpenAI, DeepSeek and Zhipu share the ``/chat/completions`` request and
reply shape and differ only in endpoint and default model.
"""

from typing import Any

from flowexec.config import Settings
from flowexec.providers.base import CompletionResult, ProviderSpec


def build_headers(api_key: str, settings: Settings) -> dict[str, str]:
    """Bearer token authentication."""
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def parse_response(data: dict[str, Any]) -> CompletionResult:
    """Extract ``choices[0].message.content``."""
    choices = data.get("choices") or []
    first = choices[0] if choices and isinstance(choices[0], dict) else {}
    message = first.get("message") or {}
    return CompletionResult(
        text=message.get("content") or "",
        usage=data.get("usage") or {},
    )


OPENAI = ProviderSpec(
    name="openai",
    display_name="OpenAI",
    default_model="gpt-4o",
    api_key_setting="openai_api_key",
    base_url_setting="openai_base_url",
    path="/chat/completions",
    build_headers=build_headers,
    parse_response=parse_response,
)

DEEPSEEK = ProviderSpec(
    name="deepseek",
    display_name="DeepSeek",
    default_model="deepseek-chat",
    api_key_setting="deepseek_api_key",
    base_url_setting="deepseek_base_url",
    path="/chat/completions",
    build_headers=build_headers,
    parse_response=parse_response,
)

ZHIPU = ProviderSpec(
    name="zhipu",
    display_name="Zhipu",
    default_model="glm-4",
    api_key_setting="zhipu_api_key",
    base_url_setting="zhipu_base_url",
    path="/chat/completions",
    build_headers=build_headers,
    parse_response=parse_response,
)
