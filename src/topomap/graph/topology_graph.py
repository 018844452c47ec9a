"""
Topology graph container for TopoMap.

Thin wrapper over a networkx MultiGraph that hands out stable integer ids.
Node ids are needed by the edge tracer before any edge exists, so the
container assigns them itself, starting at 0 in creation order.
"""

import networkx as nx

from topomap.models import TopologyEdge, TopologyNode


class GraphInvariantViolation(RuntimeError):
    """Node/edge bookkeeping went wrong; the extraction cannot continue."""


class TopologyGraph:
    """
    Landmark nodes joined by skeleton arcs.

    Parallel edges between the same pair of nodes are allowed, as are
    self-loops. Nothing is ever removed.
    """

    def __init__(self):
        self._graph = nx.MultiGraph()
        self._edges = {}
        self._next_node_id = 0
        self._next_edge_id = 0

    def add_node(self, node_type, position):
        """Create a node at `position` ([x, y]) and return its id."""
        node_id = self._next_node_id
        node = TopologyNode(
            node_id=node_id,
            node_type=node_type,
            position=[float(position[0]), float(position[1])],
        )
        self._graph.add_node(node_id, node=node)
        self._next_node_id += 1
        return node_id

    def add_edge(self, source, target, waypoints):
        """
        Connect two existing nodes and return the new edge id.

        The caller orders `waypoints` from `source` to `target`; the edge is
        stored with the smaller id as its source.

        Raises GraphInvariantViolation if either node does not exist.
        """
        missing = [n for n in (source, target) if n not in self._graph]
        if missing:
            raise GraphInvariantViolation(
                f"add_edge({source}, {target}) references unknown node(s) {missing}; "
                f"graph has {self._graph.number_of_nodes()} nodes"
            )

        points = [[float(p[0]), float(p[1])] for p in waypoints]
        if source > target:
            source, target = target, source
            points.reverse()

        edge_id = self._next_edge_id
        edge = TopologyEdge(edge_id=edge_id, source=source, target=target, waypoints=points)
        self._graph.add_edge(source, target, key=edge_id, edge=edge)
        self._edges[edge_id] = edge
        self._next_edge_id += 1
        return edge_id

    def has_node(self, node_id):
        return node_id in self._graph

    def node(self, node_id):
        return self._graph.nodes[node_id]["node"]

    def edge(self, edge_id):
        return self._edges[edge_id]

    def nodes(self):
        """All nodes in id order."""
        return [self._graph.nodes[n]["node"] for n in sorted(self._graph.nodes)]

    def edges(self):
        """All edges in id order."""
        return [self._edges[e] for e in sorted(self._edges)]

    def edges_between(self, u, v):
        """Edges joining `u` and `v` in either direction."""
        if not self._graph.has_edge(u, v):
            return []
        return [data["edge"] for _, data in sorted(self._graph.get_edge_data(u, v).items())]

    def degree(self, node_id):
        """Number of edge ends at a node; a self-loop counts twice."""
        return self._graph.degree(node_id)

    def number_of_nodes(self):
        return self._graph.number_of_nodes()

    def number_of_edges(self):
        return self._graph.number_of_edges()

    def to_networkx(self):
        """
        Plain MultiGraph copy with node and edge attributes flattened.

        Nodes carry `node_type` and `pos`; edges carry `edge_id`, `waypoints`
        and `weight` (polyline length including the node positions).
        """
        out = nx.MultiGraph()
        for node in self.nodes():
            out.add_node(node.node_id, node_type=node.node_type.value, pos=tuple(node.position))
        for edge in self.edges():
            out.add_edge(
                edge.source,
                edge.target,
                key=edge.edge_id,
                edge_id=edge.edge_id,
                waypoints=[tuple(p) for p in edge.waypoints],
                weight=edge.length(
                    self.node(edge.source).position,
                    self.node(edge.target).position,
                ),
            )
        return out
