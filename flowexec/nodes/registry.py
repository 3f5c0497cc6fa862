"""Node registry.

Maps workflow node types to their executors.
"""

from typing import Type

import structlog

from flowexec.models.node import NodeCategory, NodeDefinition
from flowexec.nodes.base import BaseNode

logger = structlog.get_logger()


class NodeRegistryError(Exception):
    """Error in node registry operations."""

    pass


class NodeRegistry:
    """Registry of node executors keyed by node type.

    One executor may handle several node types (the trigger executor
    handles ``trigger``, ``webhook`` and ``schedule``).

    Example usage:
        registry = NodeRegistry()
        registry.register(TransformNode)

        node = registry.get("transform")
        output = await node.run(workflow_node, context)
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._nodes: dict[str, BaseNode] = {}

    def register(self, node_class: Type[BaseNode]) -> None:
        """Register a node class for every type it handles.

        Args:
            node_class: Node class to register

        Raises:
            NodeRegistryError: If one of its node types is already registered
        """
        instance = node_class()
        definition = instance.get_definition()

        taken = [t for t in definition.node_types if t in self._nodes]
        if taken:
            raise NodeRegistryError(
                f"Node type(s) {', '.join(taken)} already registered"
            )

        for node_type in definition.node_types:
            self._nodes[node_type] = instance

        logger.debug(
            "node_registered",
            name=definition.name,
            node_types=list(definition.node_types),
            category=definition.category.value,
        )

    def unregister(self, node_type: str) -> None:
        """Remove a node type from the registry."""
        self._nodes.pop(node_type, None)

    def get(self, node_type: str) -> BaseNode | None:
        """Get the executor for a node type, or None if not registered."""
        return self._nodes.get(node_type)

    def list_types(self) -> list[str]:
        """List registered node types."""
        return sorted(self._nodes)

    def list_all(self) -> list[NodeDefinition]:
        """List definitions of all registered executors, once each."""
        seen: dict[str, NodeDefinition] = {}
        for node in self._nodes.values():
            definition = node.get_definition()
            seen.setdefault(definition.name, definition)
        return list(seen.values())

    def list_by_category(self, category: NodeCategory) -> list[NodeDefinition]:
        """List definitions in a category."""
        return [d for d in self.list_all() if d.category == category]

    def get_catalog(self) -> dict[str, object]:
        """Node catalog grouped by category."""
        definitions = self.list_all()
        return {
            "categories": {
                category.value: [d.to_dict() for d in definitions if d.category == category]
                for category in NodeCategory
            },
            "total_count": len(definitions),
        }

    def load_builtin_nodes(self) -> int:
        """Load all built-in nodes.

        Returns:
            Number of nodes loaded
        """
        from flowexec.nodes.apis.ai import AINode
        from flowexec.nodes.apis.http_request import HttpRequestNode
        from flowexec.nodes.logic.condition import ConditionNode
        from flowexec.nodes.logic.loop import LoopNode
        from flowexec.nodes.tools.transform import TransformNode
        from flowexec.nodes.trigger import TriggerNode

        builtin_nodes = [
            TriggerNode,
            AINode,
            HttpRequestNode,
            ConditionNode,
            TransformNode,
            LoopNode,
        ]

        count = 0
        for node_class in builtin_nodes:
            try:
                self.register(node_class)
                count += 1
            except NodeRegistryError as e:
                logger.warning(
                    "builtin_node_registration_failed",
                    error=str(e),
                )

        logger.debug("builtin_nodes_loaded", count=count)
        return count


# Singleton instance
_registry: NodeRegistry | None = None


def get_node_registry() -> NodeRegistry:
    """Get or create the singleton node registry.

    Returns:
        NodeRegistry instance with builtin nodes loaded
    """
    global _registry
    if _registry is None:
        _registry = NodeRegistry()
        _registry.load_builtin_nodes()
    return _registry
