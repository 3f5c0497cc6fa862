"""Node executors - one per workflow node kind."""

from flowexec.nodes.base import BaseNode
from flowexec.nodes.registry import NodeRegistry, get_node_registry

__all__ = [
    "BaseNode",
    "NodeRegistry",
    "get_node_registry",
]
