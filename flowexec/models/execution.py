"""Execution models.

Runtime state of one workflow run and the results it produces.
None of these are persisted by the engine; callers store
``ExecutionResult.to_dict()`` wherever they keep execution history.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from flowexec.models.workflow import WorkflowEdge, WorkflowNode

if TYPE_CHECKING:
    import httpx

    from flowexec.providers.dispatch import ProviderDispatcher


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass
class ExecutionContext:
    """State threaded through one execution run.

    Owned by a single run and never shared. Only the scheduler writes
    ``node_outputs``, after a node's executor has returned.
    """

    workflow_id: str
    execution_id: str
    variables: dict[str, Any] = field(default_factory=dict)
    node_outputs: dict[str, Any] = field(default_factory=dict)
    started_at: datetime = field(default_factory=utc_now)
    http_client: "httpx.AsyncClient | None" = field(default=None, repr=False)
    providers: "ProviderDispatcher | None" = field(default=None, repr=False)

    def as_scope(self) -> dict[str, Any]:
        """Names visible to templates and expressions.

        Variables are exposed as bare identifiers (``input``) next to the
        context's own keys (``variables``, ``nodeOutputs``).
        """
        scope = dict(self.variables)
        scope.update(
            workflowId=self.workflow_id,
            executionId=self.execution_id,
            variables=self.variables,
            nodeOutputs=self.node_outputs,
        )
        return scope


@dataclass
class NodeResult:
    """Outcome of one visited node."""

    node_id: str
    node_type: str
    success: bool
    duration: int  # milliseconds
    output: Any = None
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase JSON shape."""
        data: dict[str, Any] = {
            "nodeId": self.node_id,
            "nodeType": self.node_type,
            "success": self.success,
            "duration": self.duration,
        }
        if self.success:
            data["output"] = self.output
        else:
            data["error"] = self.error
            data["errorCode"] = self.error_code
        return data


@dataclass
class ExecutionResult:
    """Outcome of a whole run.

    ``node_results`` preserves visit order. On success ``output`` is the
    output of the last node in execution order.
    """

    execution_id: str
    success: bool
    duration: int  # milliseconds
    output: Any = None
    error: str | None = None
    error_code: str | None = None
    node_results: dict[str, NodeResult] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase JSON shape."""
        data: dict[str, Any] = {
            "executionId": self.execution_id,
            "success": self.success,
            "duration": self.duration,
            "nodeResults": {
                node_id: result.to_dict() for node_id, result in self.node_results.items()
            },
        }
        if self.success:
            data["output"] = self.output
        else:
            data["error"] = self.error
            data["errorCode"] = self.error_code
        return data


class ExecutionCreate(BaseModel):
    """Schema for running a workflow graph."""

    model_config = ConfigDict(populate_by_name=True)

    nodes: list[WorkflowNode] = Field(default_factory=list)
    edges: list[WorkflowEdge] = Field(default_factory=list)
    input: Any = None
    workflow_id: str = Field(default="", alias="workflowId")
