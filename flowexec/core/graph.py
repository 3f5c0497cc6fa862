"""Graph traversal.

Execution order is the depth-first preorder from the trigger node,
following outgoing edges in edge-list order and visiting each node once.
This is not a topological sort: a node with several predecessors runs
when it is first reached, possibly before its other predecessors.
"""

from collections.abc import Callable, Iterator, Sequence

from flowexec.core.errors import NoTriggerNodeError
from flowexec.models.workflow import WorkflowEdge, WorkflowNode

BRANCH_HANDLES = ("true", "false")

# Returns the branch handle a visited node selected, or None to follow all edges
BranchSelector = Callable[[str], str | None]


def find_trigger_node(nodes: Sequence[WorkflowNode]) -> WorkflowNode:
    """Return the first trigger, webhook or schedule node.

    Raises:
        NoTriggerNodeError: If the workflow has none
    """
    for node in nodes:
        if node.is_trigger:
            return node
    raise NoTriggerNodeError()


def iter_execution_order(
    edges: Sequence[WorkflowEdge],
    start_id: str,
    select_branch: BranchSelector | None = None,
) -> Iterator[str]:
    """Yield node ids in DFS preorder starting at ``start_id``.

    The generator is lazy: a node's outgoing edges are only read after the
    caller has resumed it, i.e. after the yielded node has run. That lets
    ``select_branch`` look at the node's output to prune edges whose
    ``source_handle`` names the other branch. Edges without a branch
    handle are always followed.
    """
    outgoing: dict[str, list[WorkflowEdge]] = {}
    for edge in edges:
        outgoing.setdefault(edge.source, []).append(edge)

    visited: set[str] = set()
    stack = [start_id]

    while stack:
        node_id = stack.pop()
        if node_id in visited:
            continue
        visited.add(node_id)
        yield node_id

        branch = select_branch(node_id) if select_branch else None
        targets = [
            edge.target
            for edge in outgoing.get(node_id, [])
            if branch is None
            or edge.source_handle not in BRANCH_HANDLES
            or edge.source_handle == branch
        ]
        # Reversed so the first edge is popped first
        stack.extend(reversed(targets))


def get_execution_order(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
    start_id: str | None = None,
) -> list[str]:
    """Full execution order, following every edge.

    Args:
        nodes: Workflow nodes (used to find the trigger when no start is given)
        edges: Workflow edges
        start_id: Node to start from; defaults to the trigger node

    Returns:
        Node ids in execution order
    """
    if start_id is None:
        start_id = find_trigger_node(nodes).id
    return list(iter_execution_order(edges, start_id))
