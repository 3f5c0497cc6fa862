"""Core layer - graph traversal, templating and expression evaluation."""

from flowexec.core.errors import ExecutionError
from flowexec.core.expressions import evaluate_expression, interpolate_object, interpolate_string
from flowexec.core.graph import find_trigger_node, get_execution_order
from flowexec.core.paths import get_value_by_path

__all__ = [
    "ExecutionError",
    "evaluate_expression",
    "find_trigger_node",
    "get_execution_order",
    "get_value_by_path",
    "interpolate_object",
    "interpolate_string",
]
