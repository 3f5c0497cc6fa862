"""Condition node.

Evaluates a boolean expression. The result is recorded as the node output;
whether it also prunes the untaken branch is decided by the scheduler.
"""

from dataclasses import dataclass
from typing import Any

from flowexec.core.errors import NodeValidationError
from flowexec.core.expressions import evaluate_expression, is_truthy
from flowexec.models.execution import ExecutionContext
from flowexec.models.node import NodeCategory, NodeDefinition
from flowexec.nodes.base import BaseNode, pick


@dataclass
class ConditionInput:
    """Input for condition node."""

    expression: str
    true_label: str | None = None
    false_label: str | None = None


class ConditionNode(BaseNode[ConditionInput]):
    """Condition node.

    Example:
        data = {"expression": "input.score > 60"}
        # output = {"condition": True}
    """

    def get_definition(self) -> NodeDefinition:
        """Get node definition."""
        return NodeDefinition(
            name="condition",
            display_name="Condition",
            description="Evaluate an expression and expose a true/false branch",
            category=NodeCategory.LOGIC,
            node_types=("condition",),
            fields=["expression", "trueLabel", "falseLabel"],
        )

    def validate_data(self, data: dict[str, Any]) -> ConditionInput:
        """Validate input data."""
        expression = data.get("expression")

        if not expression:
            raise NodeValidationError("Expression is required", field="expression")

        if not isinstance(expression, str):
            raise NodeValidationError("Expression must be a string", field="expression")

        return ConditionInput(
            expression=expression,
            true_label=pick(data, "trueLabel", "true_label"),
            false_label=pick(data, "falseLabel", "false_label"),
        )

    async def execute(self, data: ConditionInput, context: ExecutionContext) -> dict[str, bool]:
        """Evaluate the condition."""
        return {"condition": is_truthy(evaluate_expression(data.expression, context))}
