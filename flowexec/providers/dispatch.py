"""Provider dispatch.

Routes a prompt to the AI backend named by an AI node. Backends are
entries of ``PROVIDERS`` keyed by provider name.
"""

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from flowexec.config import Settings, get_settings
from flowexec.core.errors import MissingCredentialError, ProviderError, UnknownProviderError
from flowexec.providers.anthropic import CLAUDE
from flowexec.providers.base import CompletionConfig, CompletionResult, ProviderSpec
from flowexec.providers.openai_compatible import DEEPSEEK, OPENAI, ZHIPU

logger = structlog.get_logger()

PROVIDERS: dict[str, ProviderSpec] = {
    spec.name: spec for spec in (CLAUDE, OPENAI, DEEPSEEK, ZHIPU)
}


class ProviderDispatcher:
    """Send single-shot chat completions to the configured providers.

    API keys come from the per-run ``api_keys`` map first and fall back to
    settings. One POST per call; no retries and no streaming.

    Example usage:
        dispatcher = ProviderDispatcher({"openai": "sk-..."})
        result = await dispatcher.complete("openai", "Say hi", CompletionConfig())
        print(result.text)
    """

    def __init__(
        self,
        api_keys: Mapping[str, str] | None = None,
        *,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_keys = dict(api_keys or {})
        self.settings = settings or get_settings()
        self._http_client = http_client

    def get_spec(self, provider: str) -> ProviderSpec:
        """Look up a provider in the dispatch table.

        Raises:
            UnknownProviderError: If no adapter exists for ``provider``
        """
        spec = PROVIDERS.get(provider)
        if spec is None:
            raise UnknownProviderError(provider)
        return spec

    def resolve_api_key(self, spec: ProviderSpec) -> str:
        """Find the API key for a provider.

        Raises:
            MissingCredentialError: If neither the run nor settings supply one
        """
        api_key = self.api_keys.get(spec.name) or self.settings.get_secret(spec.api_key_setting)
        if not api_key:
            raise MissingCredentialError(spec.name, spec.display_name)
        return api_key

    async def complete(
        self,
        provider: str,
        prompt: str,
        config: CompletionConfig | None = None,
    ) -> CompletionResult:
        """Run one chat completion.

        Args:
            provider: Provider name (claude, openai, deepseek, zhipu)
            prompt: Fully interpolated prompt text
            config: Model, max tokens and temperature overrides

        Returns:
            Normalised ``CompletionResult``

        Raises:
            UnknownProviderError: Unknown provider name
            MissingCredentialError: No API key available
            ProviderError: Non-2xx reply, invalid reply or transport failure
        """
        spec = self.get_spec(provider)
        api_key = self.resolve_api_key(spec)
        config = config or CompletionConfig()

        base_url = getattr(self.settings, spec.base_url_setting).rstrip("/")
        payload = spec.build_payload(prompt, config)

        logger.info(
            "provider_request_starting",
            provider=spec.name,
            model=payload["model"],
            prompt_length=len(prompt),
        )

        if self._http_client is not None:
            response = await self._post(self._http_client, spec, base_url, api_key, payload)
        else:
            async with httpx.AsyncClient() as client:
                response = await self._post(client, spec, base_url, api_key, payload)

        if not response.is_success:
            logger.warning(
                "provider_request_failed",
                provider=spec.name,
                status_code=response.status_code,
            )
            raise ProviderError(
                f"{spec.display_name} API error: {response.text}",
                provider=spec.name,
                status_code=response.status_code,
                error_code="AUTH_ERROR" if response.status_code == 401 else "API_ERROR",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"{spec.display_name} API returned invalid JSON",
                provider=spec.name,
                status_code=response.status_code,
            ) from e

        result = spec.parse_response(data if isinstance(data, dict) else {})

        logger.info(
            "provider_request_completed",
            provider=spec.name,
            response_length=len(result.text),
        )
        return result

    async def _post(
        self,
        client: httpx.AsyncClient,
        spec: ProviderSpec,
        base_url: str,
        api_key: str,
        payload: dict[str, Any],
    ) -> httpx.Response:
        try:
            return await client.post(
                f"{base_url}{spec.path}",
                headers=spec.build_headers(api_key, self.settings),
                json=payload,
                timeout=self.settings.llm_timeout,
            )
        except httpx.RequestError as e:
            raise ProviderError(
                f"Request failed: {str(e)}",
                provider=spec.name,
                error_code="NETWORK_ERROR",
            ) from e
