"""API nodes - calls to AI providers and arbitrary HTTP endpoints."""

from flowexec.nodes.apis.ai import AINode
from flowexec.nodes.apis.http_request import HttpRequestNode

__all__ = [
    "AINode",
    "HttpRequestNode",
]
