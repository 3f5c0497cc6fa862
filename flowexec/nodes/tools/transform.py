"""Transform node.

Reshapes data with an expression over the execution context.
"""

from dataclasses import dataclass
from typing import Any

from flowexec.core.errors import NodeValidationError
from flowexec.core.expressions import evaluate_expression
from flowexec.models.execution import ExecutionContext
from flowexec.models.node import NodeCategory, NodeDefinition
from flowexec.nodes.base import BaseNode


@dataclass
class TransformInput:
    """Input for transform node."""

    expression: str


class TransformNode(BaseNode[TransformInput]):
    """Transform node returning the raw value of its expression.

    Supports member and index access, arithmetic, comparisons and
    list/dict literals. An expression that cannot be evaluated is looked up
    as a dotted path instead, and yields None if that fails too.

    Example:
        data = {"expression": "{'total': input.price * input.qty, 'first': input.items[0]}"}
    """

    def get_definition(self) -> NodeDefinition:
        """Get node definition."""
        return NodeDefinition(
            name="transform",
            display_name="Transform",
            description="Compute a new value from previous node outputs",
            category=NodeCategory.ACTION,
            node_types=("transform",),
            fields=["expression"],
        )

    def validate_data(self, data: dict[str, Any]) -> TransformInput:
        """Validate input data."""
        expression = data.get("expression")

        if not expression:
            raise NodeValidationError("Expression is required", field="expression")

        if not isinstance(expression, str):
            raise NodeValidationError("Expression must be a string", field="expression")

        return TransformInput(expression=expression)

    async def execute(self, data: TransformInput, context: ExecutionContext) -> Any:
        """Evaluate the transform expression."""
        return evaluate_expression(data.expression, context)
