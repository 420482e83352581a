import pytest

from flowbuilder.errors import DuplicateOutgoingConnection
from flowbuilder.models import ConnectionProposal, Edge, FlowSnapshot, Node, NodeData, Position
from flowbuilder.store import FlowStore, NodeIdCounter


def connect(store, source, target):
    return store.add_edge(ConnectionProposal(source=source, target=target))


class TestNodeIdCounter:

    def test_sequence_starts_at_seed(self):
        counter = NodeIdCounter(start=1)
        assert [counter.next_id() for _ in range(3)] == ["node-1", "node-2", "node-3"]

    def test_reset_and_custom_prefix(self):
        counter = NodeIdCounter(start=5, prefix="msg-")
        assert counter.next_id() == "msg-5"
        counter.reset()
        assert counter.next_id() == "msg-1"

    def test_advance_past_existing_ids(self):
        counter = NodeIdCounter()
        counter.advance_past(["node-3", "node-10", "other-99", "node-x"])
        assert counter.next_id() == "node-11"

    def test_advance_past_never_goes_backwards(self):
        counter = NodeIdCounter(start=20)
        counter.advance_past(["node-2"])
        assert counter.peek == 20


class TestNodes:

    def test_create_node_ids_unique_and_ordered(self, store):
        created = [store.create_node(Position(i, i)) for i in range(10)]
        ids = [n.id for n in store.nodes]
        assert ids == [n.id for n in created]
        assert len(set(ids)) == len(ids)
        assert ids[0] == "node-1"

    def test_create_node_uses_default_data(self, store):
        node = store.create_node(Position(10, 20))
        assert node.data.label == "Send Message"
        assert node.data.message == "Enter your message here"
        assert node.type.value == "message"

    def test_add_node_keeps_given_node(self, store):
        node = Node(id="custom", position=Position(1, 2))
        assert store.add_node(node) is node
        assert store.get_node("custom") == node

    def test_next_node_id_consumes_counter(self, store):
        assert store.next_node_id() == "node-1"
        assert store.create_node(Position(0, 0)).id == "node-2"

    def test_patch_node_data_replaces_only_target(self, store):
        a = store.create_node(Position(0, 0))
        b = store.create_node(Position(1, 1))
        assert store.patch_node_data(a.id, NodeData(label="Greeting", message="Hi"))
        assert store.get_node(a.id).data == NodeData(label="Greeting", message="Hi")
        assert store.get_node(b.id) == b
        assert store.get_node(a.id).position == a.position

    def test_patch_node_data_unknown_id_is_noop(self, store):
        store.create_node(Position(0, 0))
        store.create_node(Position(1, 1))
        before = store.nodes
        assert store.patch_node_data("missing", NodeData(message="x")) is False
        assert store.nodes == before

    def test_move_node(self, store):
        a = store.create_node(Position(0, 0))
        assert store.move_node(a.id, Position(50, 60))
        assert store.get_node(a.id).position == Position(50, 60)
        assert store.move_node("missing", Position(1, 1)) is False

    def test_remove_node_drops_incident_edges(self, store):
        a = store.create_node(Position(0, 0))
        b = store.create_node(Position(1, 1))
        c = store.create_node(Position(2, 2))
        connect(store, a.id, b.id)
        connect(store, b.id, c.id)
        connect(store, c.id, a.id)

        assert store.remove_node(b.id)
        assert [n.id for n in store.nodes] == [a.id, c.id]
        assert [(e.source, e.target) for e in store.edges] == [(c.id, a.id)]

    def test_removed_ids_are_not_reused(self, store):
        a = store.create_node(Position(0, 0))
        store.remove_node(a.id)
        assert store.create_node(Position(0, 0)).id == "node-2"


class TestEdges:

    def test_add_edge_derives_id(self, store):
        a = store.create_node(Position(0, 0))
        b = store.create_node(Position(1, 1))
        verdict = connect(store, a.id, b.id)
        assert verdict.accepted
        assert verdict.edge.id == "xy-edge__node-1source-node-2target"
        assert store.edges == (verdict.edge,)

    def test_second_outgoing_edge_rejected(self, store):
        """Scenario E: A->B then A->C from the same port."""
        a, b, c = (store.create_node(Position(i, 0)) for i in range(3))
        first = connect(store, a.id, b.id)
        before = store.snapshot()

        second = connect(store, a.id, c.id)

        assert not second.accepted
        assert isinstance(second.error, DuplicateOutgoingConnection)
        assert second.reason == "A node can only have one outgoing connection"
        assert store.snapshot() == before
        assert store.edges == (first.edge,)

    def test_fan_in_allowed(self, store):
        a, b, c = (store.create_node(Position(i, 0)) for i in range(3))
        assert connect(store, a.id, c.id).accepted
        assert connect(store, b.id, c.id).accepted
        assert len(store.edges) == 2

    def test_cycles_and_self_loops_allowed(self, store):
        a = store.create_node(Position(0, 0))
        b = store.create_node(Position(1, 1))
        assert connect(store, a.id, b.id).accepted
        assert connect(store, b.id, a.id).accepted
        c = store.create_node(Position(2, 2))
        assert connect(store, c.id, c.id).accepted

    def test_at_most_one_edge_per_source_port(self, store):
        nodes = [store.create_node(Position(i, 0)) for i in range(5)]
        for src in nodes:
            for tgt in nodes:
                connect(store, src.id, tgt.id)
        pairs = [(e.source, e.source_handle) for e in store.edges]
        assert len(pairs) == len(set(pairs)) == 5

    def test_remove_edge_frees_source_port(self, store):
        a, b, c = (store.create_node(Position(i, 0)) for i in range(3))
        edge = connect(store, a.id, b.id).edge
        assert store.remove_edge(edge.id)
        assert store.remove_edge(edge.id) is False
        assert connect(store, a.id, c.id).accepted


class TestSnapshots:

    def test_snapshot_not_affected_by_later_mutations(self, store):
        store.create_node(Position(0, 0))
        snap = store.snapshot()
        store.create_node(Position(1, 1))
        store.patch_node_data("node-1", NodeData(message="changed"))
        assert len(snap.nodes) == 1
        assert snap.nodes[0].data.message == "Enter your message here"

    def test_listeners_receive_new_snapshot(self, store):
        seen = []
        store.subscribe(seen.append)
        store.create_node(Position(0, 0))
        assert len(seen) == 1
        assert seen[0].node_ids() == ("node-1",)

        store.unsubscribe(seen.append)
        store.create_node(Position(0, 0))
        assert len(seen) == 1

    def test_rejected_edge_does_not_notify(self, store):
        a, b, c = (store.create_node(Position(i, 0)) for i in range(3))
        connect(store, a.id, b.id)
        seen = []
        store.subscribe(seen.append)
        connect(store, a.id, c.id)
        assert seen == []


class TestChangeSets:

    def test_position_and_remove_changes(self, store):
        a = store.create_node(Position(0, 0))
        b = store.create_node(Position(1, 1))
        store.apply_node_changes([
            {"type": "position", "id": a.id, "position": {"x": 42, "y": 7}},
            {"type": "select", "id": a.id, "selected": True},
            {"type": "dimensions", "id": a.id},
            {"type": "remove", "id": b.id},
        ])
        assert store.get_node(a.id).position == Position(42, 7)
        assert store.get_node(b.id) is None

    def test_position_change_without_position_ignored(self, store):
        a = store.create_node(Position(3, 4))
        store.apply_node_changes([{"type": "position", "id": a.id, "dragging": True}])
        assert store.get_node(a.id).position == Position(3, 4)

    def test_unknown_change_type_skipped(self, store):
        store.create_node(Position(0, 0))
        before = store.snapshot()
        store.apply_node_changes([{"type": "replace", "id": "node-1"}])
        store.apply_edge_changes([{"type": "add", "id": "e"}])
        assert store.snapshot() == before

    def test_edge_remove_change(self, store):
        a = store.create_node(Position(0, 0))
        b = store.create_node(Position(1, 1))
        edge = connect(store, a.id, b.id).edge
        store.apply_edge_changes([{"type": "remove", "id": edge.id}])
        assert store.edges == ()


class TestLoad:

    def test_load_advances_counter(self, store):
        snap = FlowSnapshot.from_dict({
            "nodes": [
                {"id": "node-4", "position": {"x": 0, "y": 0}, "data": {"label": "A", "message": "a"}},
                {"id": "node-7", "position": {"x": 1, "y": 1}, "data": {"label": "B", "message": "b"}},
            ],
            "edges": [{"source": "node-4", "sourceHandle": "source", "target": "node-7", "targetHandle": "target"}],
        })
        store.load(snap)
        assert store.snapshot().node_ids() == ("node-4", "node-7")
        assert store.create_node(Position(0, 0)).id == "node-8"

    def test_load_drops_duplicate_outgoing_edges(self, store):
        snap = FlowSnapshot.from_dict({
            "nodes": [{"id": i} for i in ("a", "b", "c")],
            "edges": [
                {"id": "e1", "source": "a", "sourceHandle": "source", "target": "b", "targetHandle": "target"},
                {"id": "e2", "source": "a", "sourceHandle": "source", "target": "c", "targetHandle": "target"},
            ],
        })
        store.load(snap)
        assert [e.id for e in store.edges] == ["e1"]

    def test_clear(self, store):
        store.create_node(Position(0, 0))
        store.clear()
        assert store.snapshot() == FlowSnapshot()


def test_store_accepts_seeded_counter():
    store = FlowStore(id_counter=NodeIdCounter(start=100))
    assert store.create_node(Position(0, 0)).id == "node-100"


class TestSeededStore:

    def test_seeded_edges_respect_one_outgoing_per_port(self):
        nodes = [Node(id=f"node-{i}") for i in (1, 2, 3)]
        edges = [
            Edge.from_proposal(ConnectionProposal("node-1", "node-2")),
            Edge.from_proposal(ConnectionProposal("node-1", "node-3")),
        ]
        store = FlowStore(nodes=nodes, edges=edges)
        assert [(e.source, e.target) for e in store.edges] == [("node-1", "node-2")]

    def test_seeded_nodes_advance_counter(self):
        store = FlowStore(nodes=[Node(id=f"node-{i}") for i in (1, 2, 3)])
        store.create_node(Position(0, 0))
        assert store.snapshot().node_ids() == ("node-1", "node-2", "node-3", "node-4")


def test_move_to_same_position_does_not_notify(store):
    a = store.create_node(Position(5, 5))
    seen = []
    store.subscribe(seen.append)
    assert store.move_node(a.id, Position(5, 5))
    assert seen == []
