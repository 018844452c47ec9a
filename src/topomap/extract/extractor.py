"""
Topology extraction entry points.

Grid -> vacancy mask -> skeleton -> seeds -> nodes -> edges -> TopologyGraph.
"""

import numpy as np

from topomap.extract.edges import trace_edges
from topomap.extract.nodes import find_nodes
from topomap.extract.seeds import find_seed_points
from topomap.graph.topology_graph import TopologyGraph
from topomap.grid.occupancy_grid import occupancy_mask
from topomap.skeleton.thinning import thin
from topomap.tracer import get_tracer, trace


@trace(label="extract_topology")
def extract_topology(grid, config=None, skeleton_observer=None):
    """
    Build the topological graph of the free space in `grid`.

    `grid` is anything with `cell_state(x, y)` and `dimensions`.
    `skeleton_observer`, if given, is called once with the skeleton mask
    before extraction starts; it must not modify it.

    Returns (graph, skeleton).
    """
    tracer = get_tracer()

    method = config.skeleton.method if config else "zhang"
    include_node_pixels = config.extraction.include_node_pixels if config else False

    with tracer.span("skeletonize", module="extractor"):
        mask = occupancy_mask(grid)
        skeleton = thin(mask, method=method)
        skeleton.setflags(write=False)

    if skeleton_observer is not None:
        skeleton_observer(skeleton)

    graph = extract_from_skeleton(skeleton, include_node_pixels=include_node_pixels)
    return graph, skeleton


@trace(label="extract_from_skeleton")
def extract_from_skeleton(skeleton, include_node_pixels=False):
    """
    Build the topological graph of an already thinned skeleton mask.

    `skeleton` is a 2D boolean array indexed [y, x]. An empty mask yields an
    empty graph.
    """
    tracer = get_tracer()

    skeleton = np.asarray(skeleton, dtype=bool)
    if skeleton.ndim != 2:
        raise ValueError(f"Skeleton mask must be 2D, got shape {skeleton.shape}")

    graph = TopologyGraph()

    with tracer.span("find_seeds", module="extractor"):
        seeds = find_seed_points(skeleton)

    with tracer.span("find_nodes", module="extractor"):
        origins = find_nodes(skeleton, seeds, graph)

    with tracer.span("find_edges", module="extractor"):
        trace_edges(skeleton, graph, origins, include_node_pixels=include_node_pixels)

    tracer.event(f"Topology: nodes={graph.number_of_nodes()}, edges={graph.number_of_edges()}")
    return graph
