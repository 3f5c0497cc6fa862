"""Trigger node.

Entry point of every run: passes the run input through unchanged.
"""

from dataclasses import dataclass
from typing import Any, Literal

from flowexec.models.execution import ExecutionContext
from flowexec.models.node import NodeCategory, NodeDefinition
from flowexec.models.workflow import TRIGGER_NODE_TYPES
from flowexec.nodes.base import BaseNode, pick

TriggerKind = Literal["manual", "webhook", "schedule"]

TRIGGER_KINDS = ("manual", "webhook", "schedule")


@dataclass
class TriggerInput:
    """Data for trigger, webhook and schedule nodes."""

    trigger_kind: TriggerKind = "manual"
    schedule: str | None = None  # cron expression


class TriggerNode(BaseNode[TriggerInput]):
    """Pass-through trigger.

    Returns ``variables["input"]``, or ``{}`` when the run has no input.
    Scheduling and webhook delivery happen outside the executor.
    """

    def get_definition(self) -> NodeDefinition:
        """Get node definition."""
        return NodeDefinition(
            name="trigger",
            display_name="Trigger",
            description="Start the workflow with the run input",
            category=NodeCategory.TRIGGER,
            node_types=TRIGGER_NODE_TYPES,
            fields=["triggerKind", "schedule"],
        )

    def validate_data(self, data: dict[str, Any]) -> TriggerInput:
        """Validate input data."""
        kind = pick(data, "triggerKind", "trigger_kind", "type", default="manual")
        if kind not in TRIGGER_KINDS:
            # Triggers never fail a run; unknown kinds start it manually
            kind = "manual"
        return TriggerInput(trigger_kind=kind, schedule=data.get("schedule"))

    async def execute(self, data: TriggerInput, context: ExecutionContext) -> Any:
        """Return the run input."""
        value = context.variables.get("input")
        return {} if value is None else value
