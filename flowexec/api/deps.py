"""API dependencies for FastAPI dependency injection.

Provides settings, the node registry and executor instances.
"""

from typing import Annotated

from fastapi import Depends

from flowexec.config import Settings, get_settings
from flowexec.core.execution_engine import WorkflowExecutor
from flowexec.nodes.registry import NodeRegistry, get_node_registry


def get_registry() -> NodeRegistry:
    """Get the node registry with built-in nodes."""
    return get_node_registry()


def get_executor(
    settings: Annotated[Settings, Depends(get_settings)],
    registry: Annotated[NodeRegistry, Depends(get_registry)],
) -> WorkflowExecutor:
    """Get a workflow executor.

    Provider keys come from settings; each request gets its own executor
    and every run its own context.
    """
    return WorkflowExecutor(settings=settings, registry=registry)


SettingsDep = Annotated[Settings, Depends(get_settings)]
RegistryDep = Annotated[NodeRegistry, Depends(get_registry)]
ExecutorDep = Annotated[WorkflowExecutor, Depends(get_executor)]
