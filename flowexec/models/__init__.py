"""Data models - workflow graphs, execution state and node metadata."""

from flowexec.models.execution import (
    ExecutionContext,
    ExecutionCreate,
    ExecutionResult,
    NodeResult,
)
from flowexec.models.node import NodeCategory, NodeDefinition
from flowexec.models.workflow import WorkflowEdge, WorkflowGraph, WorkflowNode

__all__ = [
    "ExecutionContext",
    "ExecutionCreate",
    "ExecutionResult",
    "NodeCategory",
    "NodeDefinition",
    "NodeResult",
    "WorkflowEdge",
    "WorkflowGraph",
    "WorkflowNode",
]
