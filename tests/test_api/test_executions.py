"""Tests for the execution, node catalog and health endpoints."""

import json

import pytest
from httpx import AsyncClient


class TestExecutionEndpoints:
    """Tests for /api/v1/executions."""

    @pytest.mark.asyncio
    async def test_run_workflow(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/executions",
            json={
                "workflowId": "wf-1",
                "nodes": [
                    {"id": "t1", "type": "trigger", "position": {"x": 0, "y": 0}, "data": {}},
                    {"id": "x", "type": "transform", "data": {"expression": "input.a * 2"}},
                ],
                "edges": [{"id": "e1", "source": "t1", "target": "x"}],
                "input": {"a": 21},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["output"] == 42
        assert list(data["nodeResults"]) == ["t1", "x"]

    @pytest.mark.asyncio
    async def test_failed_run_is_still_ok(self, client: AsyncClient):
        response = await client.post("/api/v1/executions", json={"nodes": [], "edges": []})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "No trigger node found"
        assert data["errorCode"] == "NO_TRIGGER_NODE"

    @pytest.mark.asyncio
    async def test_invalid_graph_rejected(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/executions",
            json={"nodes": [{"type": "trigger"}], "edges": []},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_stream_run(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/executions/stream",
            json={
                "nodes": [{"id": "t1", "type": "trigger", "data": {}}],
                "edges": [],
                "input": {"hello": "world"},
            },
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")

        events = [
            line.split(":", 1)[1].strip()
            for line in response.text.splitlines()
            if line.startswith("event:")
        ]
        payloads = [
            json.loads(line.split(":", 1)[1])
            for line in response.text.splitlines()
            if line.startswith("data:")
        ]

        assert events == ["start", "step", "complete"]
        assert payloads[-1]["data"]["output"] == {"hello": "world"}


class TestNodeEndpoints:
    """Tests for /api/v1/nodes."""

    @pytest.mark.asyncio
    async def test_catalog(self, client: AsyncClient):
        response = await client.get("/api/v1/nodes")

        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 6
        assert set(data["categories"]) == {"trigger", "action", "logic"}

    @pytest.mark.asyncio
    async def test_by_category(self, client: AsyncClient):
        response = await client.get("/api/v1/nodes/category/logic")

        assert response.status_code == 200
        assert {d["name"] for d in response.json()} == {"condition", "loop"}

    @pytest.mark.asyncio
    async def test_unknown_category(self, client: AsyncClient):
        response = await client.get("/api/v1/nodes/category/mcp")
        assert response.status_code == 422


class TestHealth:
    """Tests for /health."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
