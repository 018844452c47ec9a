"""
Node classification on the skeleton.

Walks each component, scores every pixel by how many arms meet there, and
creates endpoint and intersection nodes. Each node also becomes the origin of
a tracing frontier for the edge tracer.
"""

from typing import NamedTuple, Tuple

from topomap.extract.neighborhood import (
    connectivity_score,
    is_endpoint_score,
    is_intersection_score,
)
from topomap.extract.seeds import component_pixels
from topomap.models import TopologyNodeType
from topomap.tracer import get_tracer, trace


class FrontierStep(NamedTuple):
    """A queued tracing visit: step onto `pixel`, coming from `predecessor`."""
    pixel: Tuple[int, int]
    predecessor: Tuple[int, int]
    owner: int

    @property
    def is_origin(self):
        return self.pixel == self.predecessor


def frontier_origin(pixel, node_id):
    """The first step of a frontier, sitting on its own node pixel."""
    return FrontierStep(pixel=pixel, predecessor=pixel, owner=node_id)


def classify_pixel(skeleton, pixel):
    """Node type for `pixel`, or None for a pass-through arc pixel."""
    score = connectivity_score(skeleton, pixel)
    if is_endpoint_score(score):
        return TopologyNodeType.ENDPOINT
    if is_intersection_score(score):
        return TopologyNodeType.INTERSECTION
    return None


@trace(label="find_nodes")
def find_nodes(skeleton, seed_points, graph):
    """
    Add a node to `graph` for every endpoint and intersection pixel.

    A component without any such pixel (a closed loop, say) gets a single
    waypoint node at the last pixel reached by its walk.

    Returns the frontier origins, one per node, in node id order.
    """
    tracer = get_tracer()
    origins = []

    for seed in seed_points:
        pixels = component_pixels(skeleton, seed)
        node_count = 0

        for pixel in pixels:
            node_type = classify_pixel(skeleton, pixel)
            if node_type is None:
                continue

            node_id = graph.add_node(node_type, pixel)
            origins.append(frontier_origin(pixel, node_id))
            node_count += 1
            tracer.event(f"Node {node_id}: {pixel} => {node_type.value}", level="DEBUG")

        if node_count > 0:
            continue

        last_pixel = pixels[-1]
        node_id = graph.add_node(TopologyNodeType.WAYPOINT, last_pixel)
        origins.append(frontier_origin(last_pixel, node_id))
        tracer.event(f"Node {node_id}: {last_pixel} => waypoint (component seeded at {seed})", level="DEBUG")

    tracer.event(f"Nodes: {graph.number_of_nodes()} from {len(seed_points)} components")
    return origins
