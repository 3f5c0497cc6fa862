"""Tool nodes - local data reshaping, no network access."""

from flowexec.nodes.tools.transform import TransformNode

__all__ = [
    "TransformNode",
]
