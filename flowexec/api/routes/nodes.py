"""Node catalog API endpoints."""

from typing import Any

from fastapi import APIRouter

from flowexec.api.deps import RegistryDep
from flowexec.models.node import NodeCategory

router = APIRouter()


@router.get("", response_model=dict[str, Any])
async def list_nodes(registry: RegistryDep) -> dict[str, Any]:
    """List all node kinds, grouped by category."""
    return registry.get_catalog()


@router.get("/category/{category}", response_model=list[dict[str, Any]])
async def list_nodes_by_category(
    category: NodeCategory,
    registry: RegistryDep,
) -> list[dict[str, Any]]:
    """List node kinds in one category (trigger, action, logic)."""
    return [d.to_dict() for d in registry.list_by_category(category)]
