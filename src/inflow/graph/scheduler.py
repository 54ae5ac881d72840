"""
Topological Scheduler.

Orders workflow nodes so that every node runs after all of its
dependencies. Every node is a vertex of the graph whether or not any
connection touches it, so isolated nodes are scheduled like any other.
"""

import logging
from collections import deque
from typing import Dict, List, Sequence

from inflow.errors import CycleError, InvalidWorkflowError
from .node import Connection, Node

logger = logging.getLogger(__name__)


def order(nodes: Sequence[Node], connections: Sequence[Connection]) -> List[Node]:
    """
    Compute an execution order using Kahn's algorithm.

    Nodes without a dependency relationship keep their input order, which
    makes the result deterministic for a given workflow.

    Args:
        nodes: All nodes of the workflow.
        connections: Dependency edges (from must run before to).

    Returns:
        The nodes in execution order, each exactly once.

    Raises:
        CycleError: If the connections contain a cycle (self-loops included).
        InvalidWorkflowError: If a connection references an unknown node.
    """
    position: Dict[str, int] = {}
    for index, node in enumerate(nodes):
        if node.id in position:
            raise InvalidWorkflowError(f"Duplicate node id '{node.id}'", details={"node_id": node.id})
        position[node.id] = index

    downstream: Dict[str, List[str]] = {node.id: [] for node in nodes}
    in_degree: Dict[str, int] = {node.id: 0 for node in nodes}

    for conn in connections:
        for endpoint in (conn.from_node_id, conn.to_node_id):
            if endpoint not in position:
                raise InvalidWorkflowError(
                    f"Connection {conn.from_node_id} -> {conn.to_node_id} references unknown node '{endpoint}'",
                    details={"node_id": endpoint},
                )
        downstream[conn.from_node_id].append(conn.to_node_id)
        in_degree[conn.to_node_id] += 1

    queue = deque(node.id for node in nodes if in_degree[node.id] == 0)
    sorted_ids: List[str] = []

    while queue:
        node_id = queue.popleft()
        sorted_ids.append(node_id)

        # Release dependents in input order
        for downstream_id in sorted(downstream[node_id], key=position.__getitem__):
            in_degree[downstream_id] -= 1
            if in_degree[downstream_id] == 0:
                queue.append(downstream_id)

    if len(sorted_ids) != len(nodes):
        remaining = [node.id for node in nodes if in_degree[node.id] > 0]
        logger.error(f"Cycle detected among nodes: {remaining}")
        raise CycleError(remaining)

    logger.debug(f"Scheduled {len(sorted_ids)} nodes: {sorted_ids}")
    return [nodes[position[node_id]] for node_id in sorted_ids]
