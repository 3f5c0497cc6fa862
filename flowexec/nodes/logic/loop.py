"""Loop node.

Iteration over ``arrayPath`` is not implemented: the node records a marker
output and the scheduler continues with its successors once.
"""

from dataclasses import dataclass
from typing import Any

import structlog

from flowexec.models.execution import ExecutionContext
from flowexec.models.node import NodeCategory, NodeDefinition
from flowexec.nodes.base import BaseNode, pick

logger = structlog.get_logger()


@dataclass
class LoopInput:
    """Input for loop node."""

    array_path: str | None = None
    item_name: str | None = None


class LoopNode(BaseNode[LoopInput]):
    """Placeholder loop node returning ``{"loop": True}``."""

    def get_definition(self) -> NodeDefinition:
        """Get node definition."""
        return NodeDefinition(
            name="loop",
            display_name="Loop",
            description="Iterate over an array (not implemented, passes through once)",
            category=NodeCategory.LOGIC,
            node_types=("loop",),
            fields=["arrayPath", "itemName"],
        )

    def validate_data(self, data: dict[str, Any]) -> LoopInput:
        """Validate input data."""
        return LoopInput(
            array_path=pick(data, "arrayPath", "array_path"),
            item_name=pick(data, "itemName", "item_name"),
        )

    async def execute(self, data: LoopInput, context: ExecutionContext) -> dict[str, bool]:
        """Return the loop marker without iterating."""
        logger.warning(
            "loop_node_not_implemented",
            array_path=data.array_path,
            execution_id=context.execution_id,
        )
        return {"loop": True}
