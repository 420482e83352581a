"""
Flow graph data model.

Nodes and edges are frozen dataclasses. Nothing here is mutated in place:
a change to a node's position or data produces a new Node, and the store
swaps it into a new tuple.

Wire shape (what the rendering layer and the export sink see):
{
  "nodes": [{"id": "node-1", "type": "message",
             "position": {"x": 100.0, "y": 100.0},
             "data": {"label": "Send Message", "message": "Enter your message here"}}],
  "edges": [{"id": "xy-edge__node-1source-node-2target",
             "source": "node-1", "sourceHandle": "source",
             "target": "node-2", "targetHandle": "target"}]
}
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple


DEFAULT_LABEL = "Send Message"
DEFAULT_MESSAGE = "Enter your message here"

# Every message node has exactly one port of each kind
SOURCE_HANDLE = "source"
TARGET_HANDLE = "target"


class NodeType(str, Enum):
    MESSAGE = "message"


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Position":
        return cls(x=float(raw.get("x", 0.0)), y=float(raw.get("y", 0.0)))


@dataclass(frozen=True)
class NodeData:
    """Payload shown on a message node and edited in the settings panel."""
    label: str = DEFAULT_LABEL
    message: str = DEFAULT_MESSAGE

    def replace(self, **changes) -> "NodeData":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "message": self.message}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "NodeData":
        return cls(
            label=str(raw.get("label", DEFAULT_LABEL)),
            message=str(raw.get("message", "")),
        )


@dataclass(frozen=True)
class Node:
    id: str
    position: Position = field(default_factory=Position)
    data: NodeData = field(default_factory=NodeData)
    type: NodeType = NodeType.MESSAGE

    def with_data(self, data: NodeData) -> "Node":
        return replace(self, data=data)

    def with_position(self, position: Position) -> "Node":
        return replace(self, position=position)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "position": self.position.to_dict(),
            "data": self.data.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Node":
        return cls(
            id=str(raw["id"]),
            type=NodeType(raw.get("type", NodeType.MESSAGE.value)),
            position=Position.from_dict(raw.get("position") or {}),
            data=NodeData.from_dict(raw.get("data") or {}),
        )


@dataclass(frozen=True)
class ConnectionProposal:
    """A drag-connect gesture from one node's source port to another's target port."""
    source: str
    target: str
    source_handle: Optional[str] = SOURCE_HANDLE
    target_handle: Optional[str] = TARGET_HANDLE


def edge_id_for(proposal: ConnectionProposal) -> str:
    # Same shape the browser graph library derives for new edges
    return (
        f"xy-edge__{proposal.source}{proposal.source_handle or ''}"
        f"-{proposal.target}{proposal.target_handle or ''}"
    )


@dataclass(frozen=True)
class Edge:
    id: str
    source: str
    target: str
    source_handle: Optional[str] = SOURCE_HANDLE
    target_handle: Optional[str] = TARGET_HANDLE

    @classmethod
    def from_proposal(cls, proposal: ConnectionProposal) -> "Edge":
        return cls(
            id=edge_id_for(proposal),
            source=proposal.source,
            target=proposal.target,
            source_handle=proposal.source_handle,
            target_handle=proposal.target_handle,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "sourceHandle": self.source_handle,
            "target": self.target,
            "targetHandle": self.target_handle,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Edge":
        proposal = ConnectionProposal(
            source=str(raw["source"]),
            target=str(raw["target"]),
            source_handle=raw.get("sourceHandle", SOURCE_HANDLE),
            target_handle=raw.get("targetHandle", TARGET_HANDLE),
        )
        edge = cls.from_proposal(proposal)
        if raw.get("id"):
            edge = replace(edge, id=str(raw["id"]))
        return edge


@dataclass(frozen=True)
class FlowSnapshot:
    """Immutable view of the node and edge collections at one point in time."""
    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    def node_ids(self) -> Tuple[str, ...]:
        return tuple(n.id for n in self.nodes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "FlowSnapshot":
        return cls(
            nodes=tuple(Node.from_dict(n) for n in payload.get("nodes", [])),
            edges=tuple(Edge.from_dict(e) for e in payload.get("edges", [])),
        )
