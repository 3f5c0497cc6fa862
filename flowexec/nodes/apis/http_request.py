"""HTTP request node.

Calls an arbitrary JSON endpoint with a templated URL and body.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx
import structlog

from flowexec.core.errors import (
    HttpStatusError,
    InvalidRequestBodyError,
    NodeExecutionError,
    NodeValidationError,
)
from flowexec.core.expressions import interpolate_object, interpolate_string
from flowexec.models.execution import ExecutionContext
from flowexec.models.node import NodeCategory, NodeDefinition
from flowexec.nodes.base import BaseNode

logger = structlog.get_logger()

Method = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]

METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")
BODY_METHODS = ("POST", "PUT", "PATCH")


@dataclass
class HttpRequestInput:
    """Input for HTTP request node."""

    url: str
    method: Method = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None
    timeout: float | None = None  # seconds


def render_body(body: str, context: ExecutionContext) -> str:
    """Parse a JSON body template, interpolate its strings and re-serialize.

    Raises:
        InvalidRequestBodyError: If the template is not valid JSON
    """
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as e:
        raise InvalidRequestBodyError(str(e)) from e
    return json.dumps(interpolate_object(parsed, context), separators=(",", ":"), ensure_ascii=False)


class HttpRequestNode(BaseNode[HttpRequestInput]):
    """HTTP request node.

    Sends ``Content-Type: application/json`` plus any custom headers. The
    body is only sent for POST, PUT and PATCH. Non-2xx replies fail the
    node; a successful reply is parsed as JSON (an empty body yields None).

    Example node data:
        {
            "method": "POST",
            "url": "https://api.example.com/users/{{input.id}}",
            "headers": {"X-Token": "abc"},
            "body": "{\\"name\\": \\"{{input.name}}\\"}"
        }
    """

    def get_definition(self) -> NodeDefinition:
        """Get node definition."""
        return NodeDefinition(
            name="http_request",
            display_name="HTTP Request",
            description="Call an HTTP endpoint and return its JSON response",
            category=NodeCategory.ACTION,
            node_types=("http",),
            fields=["method", "url", "headers", "body", "timeout"],
        )

    def validate_data(self, data: dict[str, Any]) -> HttpRequestInput:
        """Validate input data."""
        url = data.get("url")
        if not url:
            raise NodeValidationError("URL is required", field="url")
        if not isinstance(url, str):
            raise NodeValidationError("URL must be a string", field="url")

        method = str(data.get("method") or "GET").upper()
        if method not in METHODS:
            raise NodeValidationError(
                f"Method must be one of {', '.join(METHODS)}", field="method"
            )

        headers = data.get("headers") or {}
        if not isinstance(headers, dict):
            raise NodeValidationError("Headers must be an object", field="headers")

        body = data.get("body")
        if body is not None and not isinstance(body, str):
            # Editors sometimes store the body already parsed
            body = json.dumps(body)

        timeout = data.get("timeout")
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                raise NodeValidationError("Timeout must be a positive number", field="timeout")

        return HttpRequestInput(
            url=url,
            method=method,  # type: ignore[arg-type]
            headers={str(k): str(v) for k, v in headers.items()},
            body=body or None,
            timeout=timeout,
        )

    async def execute(self, data: HttpRequestInput, context: ExecutionContext) -> Any:
        """Execute the HTTP request."""
        url = interpolate_string(data.url, context)
        headers = {"Content-Type": "application/json", **data.headers}

        request_kwargs: dict[str, Any] = {"headers": headers}
        if data.body and data.method in BODY_METHODS:
            request_kwargs["content"] = render_body(data.body, context).encode("utf-8")
        if data.timeout is not None:
            request_kwargs["timeout"] = data.timeout

        logger.info(
            "http_request_starting",
            method=data.method,
            url=url,
            execution_id=context.execution_id,
        )

        if context.http_client is not None:
            response = await self._send(context.http_client, data.method, url, request_kwargs)
        else:
            async with httpx.AsyncClient() as client:
                response = await self._send(client, data.method, url, request_kwargs)

        if not response.is_success:
            logger.warning(
                "http_request_failed",
                method=data.method,
                url=url,
                status_code=response.status_code,
            )
            raise HttpStatusError(response.status_code, response.reason_phrase)

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise NodeExecutionError(
                message=f"Response from {url} is not valid JSON",
                node_name="http_request",
                error_code="INVALID_RESPONSE",
            ) from e

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        request_kwargs: dict[str, Any],
    ) -> httpx.Response:
        try:
            return await client.request(method, url, **request_kwargs)
        except httpx.RequestError as e:
            raise NodeExecutionError(
                message=f"Request failed: {str(e)}",
                node_name="http_request",
                error_code="NETWORK_ERROR",
            ) from e
