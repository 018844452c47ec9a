"""Tests for the topology graph container."""

import pytest


class TestTopologyGraph:
    """Tests for TopologyGraph."""

    def test_node_ids_start_at_zero(self):
        """Test that node ids are consecutive from 0."""
        from topomap.graph.topology_graph import TopologyGraph
        from topomap.models import TopologyNodeType

        graph = TopologyGraph()
        ids = [graph.add_node(TopologyNodeType.ENDPOINT, (i, 0)) for i in range(3)]

        assert ids == [0, 1, 2]
        assert graph.node(2).position == [2.0, 0.0]

    def test_add_edge_unknown_node(self):
        """Test that edges to missing nodes are rejected."""
        from topomap.graph.topology_graph import GraphInvariantViolation, TopologyGraph
        from topomap.models import TopologyNodeType

        graph = TopologyGraph()
        graph.add_node(TopologyNodeType.ENDPOINT, (0, 0))

        with pytest.raises(GraphInvariantViolation):
            graph.add_edge(0, 3, [])

        assert graph.number_of_edges() == 0
        assert not graph.has_node(3)

    def test_add_edge_orders_by_id(self):
        """Test that an edge given high-to-low is stored low-to-high."""
        from topomap.graph.topology_graph import TopologyGraph
        from topomap.models import TopologyNodeType

        graph = TopologyGraph()
        a = graph.add_node(TopologyNodeType.ENDPOINT, (0, 0))
        b = graph.add_node(TopologyNodeType.ENDPOINT, (3, 0))

        edge_id = graph.add_edge(b, a, [(2, 0), (1, 0)])
        edge = graph.edge(edge_id)

        assert (edge.source, edge.target) == (a, b)
        assert edge.waypoints == [[1.0, 0.0], [2.0, 0.0]]

    def test_parallel_edges_allowed(self):
        """Test that two arcs between the same nodes are both stored."""
        from topomap.graph.topology_graph import TopologyGraph
        from topomap.models import TopologyNodeType

        graph = TopologyGraph()
        a = graph.add_node(TopologyNodeType.INTERSECTION, (0, 0))
        b = graph.add_node(TopologyNodeType.INTERSECTION, (4, 0))
        graph.add_edge(a, b, [(1, -1), (2, -1), (3, -1)])
        graph.add_edge(a, b, [(1, 1), (2, 1), (3, 1)])

        assert graph.number_of_edges() == 2
        assert [e.edge_id for e in graph.edges_between(b, a)] == [0, 1]
        assert graph.degree(a) == 2

    def test_self_loop_degree(self):
        """Test that a self-loop counts twice toward the degree."""
        from topomap.graph.topology_graph import TopologyGraph
        from topomap.models import TopologyNodeType

        graph = TopologyGraph()
        w = graph.add_node(TopologyNodeType.WAYPOINT, (2, 2))
        edge_id = graph.add_edge(w, w, [(3, 2), (3, 3), (2, 3)])

        assert graph.edge(edge_id).is_self_loop
        assert graph.degree(w) == 2

    def test_to_networkx(self):
        """Test the flattened networkx export."""
        from topomap.graph.topology_graph import TopologyGraph
        from topomap.models import TopologyNodeType

        graph = TopologyGraph()
        a = graph.add_node(TopologyNodeType.ENDPOINT, (0, 0))
        b = graph.add_node(TopologyNodeType.ENDPOINT, (4, 0))
        graph.add_edge(a, b, [(1, 0), (2, 0), (3, 0)])

        nxg = graph.to_networkx()

        assert nxg.nodes[a]["node_type"] == "endpoint"
        assert nxg.nodes[b]["pos"] == (4.0, 0.0)
        data = nxg.get_edge_data(a, b)[0]
        assert data["waypoints"] == [(1.0, 0.0), (2.0, 0.0), (3.0, 0.0)]
        assert data["weight"] == pytest.approx(4.0)


class TestTopologyEdge:
    """Tests for TopologyEdge helpers."""

    def test_length_with_node_positions(self):
        """Test that node positions are added to the polyline length."""
        from topomap.models import TopologyEdge

        edge = TopologyEdge(edge_id=0, source=0, target=1, waypoints=[[1.0, 0.0], [1.0, 1.0]])

        assert edge.length() == pytest.approx(1.0)
        assert edge.length([0.0, 0.0], [2.0, 1.0]) == pytest.approx(3.0)

    def test_length_no_duplicate_endpoints(self):
        """Test that node pixels already in the polyline are not counted twice."""
        from topomap.models import TopologyEdge

        edge = TopologyEdge(edge_id=0, source=0, target=1, waypoints=[[0.0, 0.0], [3.0, 0.0]])

        assert edge.length([0.0, 0.0], [3.0, 0.0]) == pytest.approx(3.0)

    def test_edge_is_frozen(self):
        """Test that edges cannot be mutated after creation."""
        from pydantic import ValidationError
        from topomap.models import TopologyEdge

        edge = TopologyEdge(edge_id=0, source=0, target=1)

        with pytest.raises(ValidationError):
            edge.source = 5
