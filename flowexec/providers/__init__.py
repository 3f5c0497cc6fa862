"""AI provider adapters and dispatch."""

from flowexec.providers.base import CompletionConfig, CompletionResult, ProviderSpec
from flowexec.providers.dispatch import PROVIDERS, ProviderDispatcher

__all__ = [
    "CompletionConfig",
    "CompletionResult",
    "PROVIDERS",
    "ProviderDispatcher",
    "ProviderSpec",
]
