"""Node definition model.

Runtime metadata for the node kinds the executor understands (not persisted).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NodeCategory(str, Enum):
    """Node category for organization and filtering."""

    TRIGGER = "trigger"  # Starts a run
    ACTION = "action"  # Talks to the outside world or reshapes data
    LOGIC = "logic"  # Branching and iteration


@dataclass
class NodeDefinition:
    """Node definition with metadata.

    Used for the node catalog. ``node_types`` lists every ``WorkflowNode.type``
    value the node's executor handles.
    """

    name: str
    display_name: str
    description: str
    category: NodeCategory
    node_types: tuple[str, ...] = ()
    fields: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "category": self.category.value,
            "node_types": list(self.node_types),
            "fields": list(self.fields),
        }
