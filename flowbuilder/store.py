import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional

from flowbuilder.connection import ConnectionVerdict, validate_connection
from flowbuilder.models import (
    ConnectionProposal,
    Edge,
    FlowSnapshot,
    Node,
    NodeData,
    NodeType,
    Position,
)

logger = logging.getLogger(__name__)


class NodeIdCounter:
    """
    Session-scoped node id source: node-1, node-2, ...

    Ids never repeat within a session. They are not meant to be unique
    across sessions.
    """

    def __init__(self, start: int = 1, prefix: str = "node-"):
        self.prefix = prefix
        self._next = start

    @property
    def peek(self) -> int:
        return self._next

    def next_id(self) -> str:
        value = self._next
        self._next += 1
        return f"{self.prefix}{value}"

    def reset(self, start: int = 1) -> None:
        self._next = start

    def advance_past(self, ids: Iterable[str]) -> None:
        """Move the counter beyond any `{prefix}N` id already in use."""
        pattern = re.compile(rf"^{re.escape(self.prefix)}(\d+)$")
        for node_id in ids:
            match = pattern.match(node_id)
            if match:
                self._next = max(self._next, int(match.group(1)) + 1)


class FlowStore:
    """
    Canonical owner of the node and edge collections.

    Every mutation builds a new tuple and swaps it in, so a snapshot handed
    out earlier never changes underneath its reader. Listeners registered via
    subscribe() receive the new snapshot after each effective mutation.
    """

    def __init__(self, id_counter: NodeIdCounter = None,
                 nodes: Iterable[Node] = (), edges: Iterable[Edge] = ()):
        self.id_counter = id_counter or NodeIdCounter()
        self._nodes = ()
        self._edges = ()
        self._listeners: List[Callable[[FlowSnapshot], None]] = []
        nodes, edges = tuple(nodes), tuple(edges)
        if nodes or edges:
            # seeded collections obey the same rules as an import
            self.load(FlowSnapshot(nodes=nodes, edges=edges))

    # --- Queries ---

    @property
    def nodes(self):
        return self._nodes

    @property
    def edges(self):
        return self._edges

    def snapshot(self) -> FlowSnapshot:
        return FlowSnapshot(nodes=self._nodes, edges=self._edges)

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def outgoing_edges(self, node_id: str):
        return tuple(e for e in self._edges if e.source == node_id)

    # --- Listeners ---

    def subscribe(self, callback: Callable[[FlowSnapshot], None]) -> None:
        self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[FlowSnapshot], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _commit(self, nodes=None, edges=None) -> None:
        if nodes is not None:
            self._nodes = tuple(nodes)
        if edges is not None:
            self._edges = tuple(edges)
        snap = self.snapshot()
        for callback in list(self._listeners):
            callback(snap)

    # --- Node mutations ---

    def next_node_id(self) -> str:
        return self.id_counter.next_id()

    def add_node(self, node: Node) -> Node:
        """Append `node`. Id uniqueness is up to the caller."""
        self._commit(nodes=self._nodes + (node,))
        logger.info(f"Added node {node.id} at ({node.position.x:.1f}, {node.position.y:.1f})")
        return node

    def create_node(self, position: Position, data: NodeData = None,
                    node_type: NodeType = NodeType.MESSAGE) -> Node:
        """Mint a fresh id from the counter and append a new node."""
        node = Node(
            id=self.next_node_id(),
            type=node_type,
            position=position,
            data=data or NodeData(),
        )
        return self.add_node(node)

    def patch_node_data(self, node_id: str, new_data: NodeData) -> bool:
        """
        Replace the data of the node matching `node_id`.

        An unknown id is not an error: nothing changes and False is returned.
        """
        if self.get_node(node_id) is None:
            logger.debug(f"patch_node_data: unknown node {node_id}, ignoring")
            return False
        self._commit(nodes=[n.with_data(new_data) if n.id == node_id else n for n in self._nodes])
        return True

    def move_node(self, node_id: str, position: Position) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        if node.position == position:
            return True
        self._commit(nodes=[n.with_position(position) if n.id == node_id else n for n in self._nodes])
        return True

    def remove_node(self, node_id: str) -> bool:
        """Remove a node together with every edge touching it."""
        if self.get_node(node_id) is None:
            return False
        nodes = [n for n in self._nodes if n.id != node_id]
        edges = [e for e in self._edges if e.source != node_id and e.target != node_id]
        dropped = len(self._edges) - len(edges)
        self._commit(nodes=nodes, edges=edges)
        logger.info(f"Removed node {node_id} and {dropped} incident edge(s)")
        return True

    # --- Edge mutations ---

    def add_edge(self, proposal: ConnectionProposal) -> ConnectionVerdict:
        """
        Add an edge if the connection validator allows it.

        A rejected proposal leaves the store untouched; the verdict says why.
        """
        verdict = validate_connection(proposal, self._edges)
        if not verdict.accepted:
            logger.warning(
                f"Rejected connection {proposal.source}:{proposal.source_handle} -> "
                f"{proposal.target}: {verdict.reason}"
            )
            return verdict
        self._commit(edges=self._edges + (verdict.edge,))
        logger.info(f"Added edge {verdict.edge.id}")
        return verdict

    def remove_edge(self, edge_id: str) -> bool:
        edges = [e for e in self._edges if e.id != edge_id]
        if len(edges) == len(self._edges):
            return False
        self._commit(edges=edges)
        return True

    # --- Change sets from the rendering layer ---

    def apply_node_changes(self, changes: List[Dict[str, Any]]) -> None:
        """
        Apply node change dicts emitted by the canvas.

        Handles 'position' and 'remove'. 'select' and 'dimensions' are
        view-only and ignored.
        """
        for change in changes or []:
            kind = change.get("type")
            node_id = change.get("id")
            if kind == "position":
                pos = change.get("position")
                if pos is not None:
                    self.move_node(node_id, Position.from_dict(pos))
            elif kind == "remove":
                self.remove_node(node_id)
            elif kind in ("select", "dimensions"):
                continue
            else:
                logger.warning(f"Ignoring unknown node change type: {kind!r}")

    def apply_edge_changes(self, changes: List[Dict[str, Any]]) -> None:
        for change in changes or []:
            kind = change.get("type")
            if kind == "remove":
                self.remove_edge(change.get("id"))
            elif kind == "select":
                continue
            else:
                logger.warning(f"Ignoring unknown edge change type: {kind!r}")

    # --- Whole-graph replacement ---

    def load(self, snapshot: FlowSnapshot) -> None:
        """
        Replace the graph and keep the id counter ahead of imported ids.

        Imported edges go through the connection validator one by one, so a
        second edge out of an already used source port is dropped.
        """
        edges: List[Edge] = []
        for edge in snapshot.edges:
            proposal = ConnectionProposal(edge.source, edge.target, edge.source_handle, edge.target_handle)
            if validate_connection(proposal, edges).accepted:
                edges.append(edge)
            else:
                logger.warning(f"Dropping imported edge {edge.id}: source port already used")
        self.id_counter.advance_past(snapshot.node_ids())
        self._commit(nodes=snapshot.nodes, edges=edges)
        logger.info(f"Loaded flow with {len(snapshot.nodes)} nodes and {len(edges)} edges")

    def clear(self) -> None:
        self._commit(nodes=(), edges=())
