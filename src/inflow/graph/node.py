"""
Workflow Graph Definitions.

Defines the nodes, connections and workflows the engine executes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from inflow.errors import InvalidWorkflowError


class NodeType(str, Enum):
    """Types of nodes in a workflow graph."""
    INITIAL = "INITIAL"                # Placeholder node of a fresh workflow
    MANUAL_TRIGGER = "MANUAL_TRIGGER"  # Run started by hand
    HTTP_REQUEST = "HTTP_REQUEST"      # Outbound HTTP call
    AGENT_NODE = "AGENT_NODE"          # AI text generation


@dataclass(frozen=True)
class Node:
    """
    A single workflow step.

    Attributes:
        id: Unique identifier within the workflow.
        type: Node type tag used to select an executor.
        data: Type-specific configuration payload (JSON object).
        name: Optional display name.
    """
    id: str
    type: NodeType
    data: Dict[str, Any] = field(default_factory=dict)
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Node":
        """Build a node from its JSON form. Unknown type tags are kept as strings."""
        raw_type = payload["type"]
        try:
            node_type = NodeType(raw_type)
        except ValueError:
            node_type = raw_type
        return cls(
            id=payload["id"],
            type=node_type,
            data=dict(payload.get("data") or {}),
            name=payload.get("name"),
        )

    def to_dict(self) -> Dict[str, Any]:
        node_type = self.type.value if isinstance(self.type, NodeType) else self.type
        return {"id": self.id, "type": node_type, "data": self.data, "name": self.name}


@dataclass(frozen=True)
class Connection:
    """
    A dependency edge: ``from_node_id`` must execute before ``to_node_id``.
    """
    from_node_id: str
    to_node_id: str

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Connection":
        return cls(
            from_node_id=payload.get("fromNodeId", payload.get("from_node_id")),
            to_node_id=payload.get("toNodeId", payload.get("to_node_id")),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"fromNodeId": self.from_node_id, "toNodeId": self.to_node_id}


@dataclass
class Workflow:
    """
    A workflow graph as loaded from storage.

    Attributes:
        id: Workflow identifier.
        nodes: All nodes, in storage order.
        connections: Dependency edges between nodes.
        name: Optional display name.
    """
    id: str
    nodes: List[Node] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Workflow":
        return cls(
            id=payload["id"],
            name=payload.get("name"),
            nodes=[Node.from_dict(n) for n in payload.get("nodes", [])],
            connections=[Connection.from_dict(c) for c in payload.get("connections", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "nodes": [n.to_dict() for n in self.nodes],
            "connections": [c.to_dict() for c in self.connections],
        }

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def validate(self) -> None:
        """
        Check node ID uniqueness and connection endpoints.

        Raises:
            InvalidWorkflowError: If a node ID repeats or a connection
                references a node outside this workflow.
        """
        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise InvalidWorkflowError(
                    f"Duplicate node id '{node.id}' in workflow {self.id}",
                    details={"workflow_id": self.id, "node_id": node.id},
                )
            seen.add(node.id)

        for conn in self.connections:
            for endpoint in (conn.from_node_id, conn.to_node_id):
                if endpoint not in seen:
                    raise InvalidWorkflowError(
                        f"Connection {conn.from_node_id} -> {conn.to_node_id} references unknown node '{endpoint}'",
                        details={"workflow_id": self.id, "node_id": endpoint},
                    )
