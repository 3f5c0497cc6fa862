"""Workflow graph models.

Nodes and edges as produced by the workflow editor. Keys arrive in
camelCase (``sourceHandle``) and are exposed in snake_case.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

TRIGGER_NODE_TYPES = ("trigger", "webhook", "schedule")


class WorkflowNode(BaseModel):
    """A node in the workflow graph.

    ``position`` is editor metadata and is ignored by the executor.
    ``data`` is interpreted by the executor registered for ``type``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    type: str
    position: dict[str, float] = Field(default_factory=lambda: {"x": 0, "y": 0})
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_trigger(self) -> bool:
        """Whether this node can start a run."""
        return self.type in TRIGGER_NODE_TYPES


class WorkflowEdge(BaseModel):
    """A directed edge between two nodes.

    ``source_handle`` is ``"true"``/``"false"`` on a condition node's branches.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    source: str
    target: str
    source_handle: str | None = Field(default=None, alias="sourceHandle")
    target_handle: str | None = Field(default=None, alias="targetHandle")
    label: str | None = None


class WorkflowGraph(BaseModel):
    """Nodes and edges of one workflow."""

    nodes: list[WorkflowNode] = Field(default_factory=list)
    edges: list[WorkflowEdge] = Field(default_factory=list)


def parse_nodes(nodes: list[WorkflowNode | dict[str, Any]]) -> list[WorkflowNode]:
    """Accept node models or plain dicts."""
    return [n if isinstance(n, WorkflowNode) else WorkflowNode.model_validate(n) for n in nodes]


def parse_edges(edges: list[WorkflowEdge | dict[str, Any]]) -> list[WorkflowEdge]:
    """Accept edge models or plain dicts."""
    return [e if isinstance(e, WorkflowEdge) else WorkflowEdge.model_validate(e) for e in edges]
