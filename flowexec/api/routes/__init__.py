"""API route handlers."""

from flowexec.api.routes.executions import router as executions_router
from flowexec.api.routes.nodes import router as nodes_router

__all__ = [
    "executions_router",
    "nodes_router",
]
