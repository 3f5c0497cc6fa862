"""Execution error taxonomy.

Every failure the engine can record on a node or a run is an
``ExecutionError`` carrying a machine-readable ``error_code``.
"""

from typing import Any


class ExecutionError(Exception):
    """Base exception for execution errors."""

    def __init__(self, message: str, error_code: str = "EXECUTION_ERROR") -> None:
        super().__init__(message)
        self.error_code = error_code


class NoTriggerNodeError(ExecutionError):
    """The workflow has no trigger, webhook or schedule node to start from."""

    def __init__(self) -> None:
        super().__init__("No trigger node found", "NO_TRIGGER_NODE")


class UnknownNodeTypeError(ExecutionError):
    """No executor is registered for a node's type."""

    def __init__(self, node_type: str) -> None:
        super().__init__(f"Unknown node type: {node_type}", "UNKNOWN_NODE_TYPE")
        self.node_type = node_type


class ExecutionTimeoutError(ExecutionError):
    """The run exceeded its overall deadline."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Execution timed out after {timeout:g}s", "EXECUTION_TIMEOUT")
        self.timeout = timeout


class NodeExecutionError(ExecutionError):
    """Error during node execution."""

    def __init__(
        self,
        message: str,
        node_name: str,
        error_code: str = "NODE_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code)
        self.node_name = node_name
        self.details = details or {}


class NodeValidationError(ExecutionError):
    """Error validating node data."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class NodeTimeoutError(ExecutionError):
    """A node did not finish within its time budget."""

    def __init__(self, node_id: str, timeout: float) -> None:
        super().__init__(
            f"Node '{node_id}' timed out after {timeout:g}s",
            "NODE_TIMEOUT",
        )
        self.node_id = node_id
        self.timeout = timeout


class UnknownProviderError(ExecutionError):
    """An AI node names a provider with no adapter."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"Unknown AI provider: {provider}", "UNKNOWN_PROVIDER")
        self.provider = provider


class MissingCredentialError(ExecutionError):
    """No API key is configured for a provider."""

    def __init__(self, provider: str, display_name: str) -> None:
        super().__init__(f"{display_name} API key not configured", "MISSING_CREDENTIAL")
        self.provider = provider


class ProviderError(ExecutionError):
    """An AI provider call failed."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        error_code: str = "API_ERROR",
    ) -> None:
        super().__init__(message, error_code)
        self.provider = provider
        self.status_code = status_code


class HttpStatusError(ExecutionError):
    """An HTTP node received a non-2xx response."""

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__(f"HTTP {status_code}: {reason}", "HTTP_STATUS_ERROR")
        self.status_code = status_code
        self.reason = reason


class InvalidRequestBodyError(ExecutionError):
    """An HTTP node's body template is not valid JSON."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid JSON body: {message}", "INVALID_JSON_BODY")
