"""Logic nodes - branching and iteration."""

from flowexec.nodes.logic.condition import ConditionNode
from flowexec.nodes.logic.loop import LoopNode

__all__ = [
    "ConditionNode",
    "LoopNode",
]
