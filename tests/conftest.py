"""Pytest configuration and fixtures.

Provides common fixtures for all tests including:
- Isolated settings (no provider keys leak in from the environment)
- Workflow builders
- Mocked upstream HTTP via httpx.MockTransport
"""

from typing import Any, AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from flowexec.api.deps import get_executor
from flowexec.config import Settings
from flowexec.core.execution_engine import WorkflowExecutor
from flowexec.main import app
from flowexec.models.execution import ExecutionContext
from flowexec.nodes.registry import get_node_registry

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        anthropic_api_key=None,
        openai_api_key=None,
        deepseek_api_key=None,
        zhipu_api_key=None,
        node_timeout=5,
        execution_timeout=10,
        enforce_condition_branches=False,
        debug=True,
    )


@pytest.fixture
def context() -> ExecutionContext:
    """Create a bare execution context with a small input."""
    return ExecutionContext(
        workflow_id="wf-test",
        execution_id="exec-test",
        variables={"input": {"name": "Ada", "score": 75, "tags": ["a", "b"]}},
    )


def trigger(node_id: str = "t1") -> dict[str, Any]:
    """Trigger node dict."""
    return {"id": node_id, "type": "trigger", "data": {}}


def node(node_id: str, node_type: str, **data: Any) -> dict[str, Any]:
    """Node dict of any type."""
    return {"id": node_id, "type": node_type, "data": data}


def edge(source: str, target: str, handle: str | None = None) -> dict[str, Any]:
    """Edge dict, optionally leaving a condition branch handle."""
    data: dict[str, Any] = {"id": f"{source}-{target}", "source": source, "target": target}
    if handle is not None:
        data["sourceHandle"] = handle
    return data


@pytest.fixture
def mock_client() -> Callable[[Handler], httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by ``handler``."""

    def _build(handler: Handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _build


@pytest.fixture
def make_executor(
    test_settings: Settings,
    mock_client: Callable[[Handler], httpx.AsyncClient],
) -> Callable[..., WorkflowExecutor]:
    """Build an executor wired to a mocked upstream."""

    def _build(
        handler: Handler | None = None,
        api_keys: dict[str, str] | None = None,
        **overrides: Any,
    ) -> WorkflowExecutor:
        settings = test_settings.model_copy(update=overrides) if overrides else test_settings
        client = mock_client(handler) if handler is not None else None
        return WorkflowExecutor(
            api_keys,
            settings=settings,
            http_client=client,
            registry=get_node_registry(),
        )

    return _build


@pytest_asyncio.fixture
async def client(test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""

    def override_get_executor() -> WorkflowExecutor:
        return WorkflowExecutor(settings=test_settings, registry=get_node_registry())

    app.dependency_overrides[get_executor] = override_get_executor

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
