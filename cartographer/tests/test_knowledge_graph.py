"""
Tests for the knowledge graph and its store backends.

Run with: python -m cartographer.tests.test_knowledge_graph
"""

from cartographer.graph import Edge, EdgeType, KnowledgeGraph, Node, NodeType
from cartographer.graph.graph_store_factory import create_graph_store
from cartographer.graph.memory_store import MemoryStore
from cartographer.graph.networkx_store import NetworkXStore


def _graphs():
    return [
        KnowledgeGraph(create_graph_store("networkx")),
        KnowledgeGraph(create_graph_store("memory")),
    ]


def test_store_factory():
    assert isinstance(create_graph_store("networkx"), NetworkXStore)
    assert isinstance(create_graph_store("MEMORY"), MemoryStore)
    try:
        create_graph_store("neo4j")
    except ValueError as e:
        assert "neo4j" in str(e)
    else:
        raise AssertionError("unknown backend should raise ValueError")

    print("Store factory: PASSED")


def test_nodes_by_type_in_insertion_order():
    for graph in _graphs():
        for path in ["/ws/z.py", "/ws/a.py", "/ws/m.py"]:
            graph.add_node(Node(id=path, type=NodeType.FILE, data={"path": path}))
        graph.add_node(Node(id="/ws", type=NodeType.FOLDER, data={"path": "/ws"}))

        files = graph.get_nodes_by_type("File")
        assert [n.id for n in files] == ["/ws/z.py", "/ws/a.py", "/ws/m.py"]
        assert all(n.type == NodeType.FILE for n in files)
        assert [n.id for n in graph.get_nodes_by_type(NodeType.FOLDER)] == ["/ws"]
        assert graph.get_nodes_by_type("Function") == []
        assert graph.get_nodes_by_type("Class") == []
        assert graph.get_node_count() == 4

    print("Nodes by type: PASSED")


def test_reinsert_overwrites_data_not_type():
    for graph in _graphs():
        graph.add_node(Node(id="x", type=NodeType.FILE, data={"path": "x", "old": True}))
        graph.add_node(Node(id="x", type=NodeType.FUNCTION, data={"name": "x"}))

        node = graph.get_node("x")
        assert node.type == NodeType.FILE
        assert node.data == {"name": "x"}
        assert graph.get_node_count() == 1
        assert [n.id for n in graph.get_nodes_by_type(NodeType.FILE)] == ["x"]
        assert graph.get_nodes_by_type(NodeType.FUNCTION) == []

    print("Re-insert keeps type: PASSED")


def test_edges_keep_duplicates_and_missing_endpoints():
    for graph in _graphs():
        graph.add_node(Node(id="a", type=NodeType.FUNCTION, data={"name": "a"}))
        graph.add_edge(Edge("a", "b", EdgeType.CALLS))
        graph.add_edge(Edge("a", "b", EdgeType.CALLS))
        graph.add_edge(Edge("ghost", "a", EdgeType.CALLS))

        assert graph.get_edge_count() == 3
        assert graph.get_node_count() == 1
        assert graph.get_node("b") is None
        assert not graph.has_node("ghost")

        outgoing = graph.get_outgoing_edges("a")
        assert outgoing == [Edge("a", "b", EdgeType.CALLS)] * 2
        assert graph.get_incoming_edges("b") == [Edge("a", "b", EdgeType.CALLS)] * 2
        assert graph.get_incoming_edges("a") == [Edge("ghost", "a", EdgeType.CALLS)]

    print("Duplicate edges: PASSED")


def test_absent_lookups_return_empty():
    for graph in _graphs():
        assert graph.get_node("nope") is None
        assert graph.get_outgoing_edges("nope") == []
        assert graph.get_incoming_edges("nope") == []
        assert graph.get_node_count() == 0
        assert graph.get_edge_count() == 0

    print("Absent lookups: PASSED")


def test_statistics():
    graph = KnowledgeGraph(MemoryStore())
    graph.add_node(Node(id="/ws/a.py", type=NodeType.FILE))
    graph.add_node(Node(id="/ws/a.py::f::1", type=NodeType.FUNCTION, data={"name": "f"}))
    graph.add_edge(Edge("/ws/a.py", "/ws/a.py::f::1", EdgeType.DEFINES))

    stats = graph.get_statistics()
    assert stats["nodes"] == 2
    assert stats["edges"] == 1
    assert stats["node_types"] == {"File": 1, "Folder": 0, "Function": 1}
    assert stats["edge_types"] == {"DEFINES": 1}

    print("Statistics: PASSED")


def test_node_data_is_not_shared():
    for graph in _graphs():
        calls = ["parse"]
        graph.add_node(Node(id="f", type=NodeType.FUNCTION, data={"name": "f", "calls": calls}))
        calls.append("later")

        node = graph.get_node("f")
        node.data["calls"].append("edited")

        assert graph.get_node("f").data["calls"] == ["parse"]

    print("Node data not shared: PASSED")


def test_store_clear():
    for store in (MemoryStore(), NetworkXStore()):
        store.add_node("a", "Function", {"name": "a"})
        store.add_edge("a", "b", "CALLS")
        store.clear()

        assert store.number_of_nodes() == 0
        assert store.number_of_edges() == 0
        assert not store.has_node("a")
        assert store.out_edges("a") == []

    print("Store clear: PASSED")


def test_edge_serialization():
    edge = Edge("/ws/a.py", "/ws/b.py", EdgeType.IMPORTS)
    assert edge.to_dict() == {"from": "/ws/a.py", "to": "/ws/b.py", "type": "IMPORTS"}
    assert Edge.from_dict(edge.to_dict()) == edge

    print("Edge serialization: PASSED")


def run_tests():
    """Run all tests."""
    print("=" * 60)
    print("KNOWLEDGE GRAPH TESTS")
    print("=" * 60)

    test_store_factory()
    test_nodes_by_type_in_insertion_order()
    test_reinsert_overwrites_data_not_type()
    test_edges_keep_duplicates_and_missing_endpoints()
    test_absent_lookups_return_empty()
    test_statistics()
    test_node_data_is_not_shared()
    test_store_clear()
    test_edge_serialization()

    print("\nALL TESTS PASSED")


if __name__ == "__main__":
    run_tests()
