"""Workflow execution engine for trigger/AI/HTTP/condition/transform graphs."""

from flowexec.core.execution_engine import ExecutionEvent, WorkflowExecutor
from flowexec.models.execution import ExecutionResult, NodeResult

__version__ = "0.1.0"

__all__ = [
    "ExecutionEvent",
    "ExecutionResult",
    "NodeResult",
    "WorkflowExecutor",
]
