"""
Edge tracing on the skeleton.

All node frontiers expand together as one breadth-first search over a shared
FIFO queue. Each skeleton pixel is claimed by the first frontier to reach it.
When a frontier steps onto a pixel that is already claimed, two arcs have met:
the arc is rebuilt by following predecessor links back to both owning nodes
and added to the graph as an edge.
"""

from collections import deque
from enum import IntEnum
from typing import NamedTuple, Optional, Tuple

import numpy as np

from topomap.extract.neighborhood import forward_visit_mask, neighbor_at
from topomap.extract.nodes import FrontierStep
from topomap.graph.topology_graph import GraphInvariantViolation
from topomap.tracer import get_tracer, trace


class ExplorationState(IntEnum):
    UNVISITED = 0
    VISITED = 1
    MERGED = 2


_ALLOWED_TRANSITIONS = {
    (ExplorationState.UNVISITED, ExplorationState.VISITED),
    (ExplorationState.VISITED, ExplorationState.MERGED),
    # two arcs can share ancestor pixels near a frontier origin
    (ExplorationState.MERGED, ExplorationState.MERGED),
}


class ExplorationStateError(RuntimeError):
    """A pixel's exploration record was moved through an illegal transition."""


class ExplorationRecord(NamedTuple):
    state: ExplorationState
    owner: Optional[int]
    predecessor: Tuple[int, int]


class ExplorationMap:
    """
    Per-pixel tracing state, stored as flat arrays indexed by y * width + x.

    Every pixel starts UNVISITED, unowned, and as its own predecessor.
    """

    def __init__(self, shape):
        self.height, self.width = shape
        size = self.height * self.width
        self._state = np.full(size, ExplorationState.UNVISITED, dtype=np.int8)
        self._owner = np.full(size, -1, dtype=np.int64)
        self._predecessor = np.arange(size, dtype=np.int64)

    def _index(self, pixel):
        return pixel[1] * self.width + pixel[0]

    def _pixel(self, index):
        return int(index % self.width), int(index // self.width)

    def state(self, pixel):
        return ExplorationState(int(self._state[self._index(pixel)]))

    def owner(self, pixel):
        owner = int(self._owner[self._index(pixel)])
        return None if owner < 0 else owner

    def predecessor(self, pixel):
        return self._pixel(self._predecessor[self._index(pixel)])

    def record(self, pixel):
        return ExplorationRecord(self.state(pixel), self.owner(pixel), self.predecessor(pixel))

    def _transition(self, pixel, new_state):
        current = self.state(pixel)
        if (current, new_state) not in _ALLOWED_TRANSITIONS:
            raise ExplorationStateError(
                f"Pixel {pixel}: illegal transition {current.name} -> {new_state.name}"
            )
        self._state[self._index(pixel)] = new_state

    def visit(self, pixel, predecessor, owner):
        """Claim an unvisited pixel for `owner`, reached from `predecessor`."""
        self._transition(pixel, ExplorationState.VISITED)
        index = self._index(pixel)
        self._predecessor[index] = self._index(predecessor)
        self._owner[index] = owner

    def merge(self, pixel):
        """Mark a visited pixel as consumed by an emitted edge."""
        self._transition(pixel, ExplorationState.MERGED)

    def walk_to_origin(self, pixel):
        """
        Follow predecessor links from `pixel` to its frontier origin.

        Returns the pixels from `pixel` to the origin inclusive. Every pixel
        on the way except the origin is marked MERGED; origins stay VISITED
        so later arcs can still end on them.
        """
        path = []
        pos = pixel
        while True:
            path.append(pos)
            prev = self.predecessor(pos)
            if prev == pos:
                break
            self.merge(pos)
            pos = prev
        return path

    def unvisited(self, skeleton):
        """Skeleton pixels no frontier ever reached."""
        flat = np.asarray(skeleton, dtype=bool).ravel()
        missing = np.nonzero(flat & (self._state == ExplorationState.UNVISITED))[0]
        return [self._pixel(i) for i in missing]


def normalize_direction(source, target, waypoints):
    """
    Order an arc from the smaller node id to the larger one.

    Returns (source, target, waypoints), swapped and reversed when `source`
    is the larger id. Applying it to its own output changes nothing.
    """
    if source > target:
        return target, source, list(reversed(waypoints))
    return source, target, list(waypoints)


def merge_and_add_edge(graph, exploration, this_side, other_side, include_node_pixels=False):
    """
    Rebuild the arc through two touching pixels and add it to `graph`.

    `this_side` is the pixel the colliding frontier came from and `other_side`
    the already-claimed pixel it stepped onto. Returns the new edge id.
    """
    this_root = exploration.record(this_side).owner
    other_root = exploration.record(other_side).owner

    this_path = exploration.walk_to_origin(this_side)
    other_path = exploration.walk_to_origin(other_side)
    path = this_path[::-1] + other_path

    source, target, path = normalize_direction(this_root, other_root, path)
    if not include_node_pixels:
        path = path[1:-1]

    try:
        return graph.add_edge(source, target, path)
    except GraphInvariantViolation as e:
        raise GraphInvariantViolation(
            f"{e} (arc collision at {this_side} -> {other_side})"
        ) from e


@trace(label="trace_edges")
def trace_edges(skeleton, graph, origins, include_node_pixels=False, exploration=None):
    """
    Trace every skeleton arc between the nodes of `graph`.

    `origins` are the frontier origins from node classification; all of them
    are queued before any expansion so that pixels are claimed in true
    breadth-first order. Pass an ExplorationMap as `exploration` to inspect
    the per-pixel state afterwards.

    Returns the number of edges added.
    """
    tracer = get_tracer()

    skeleton = np.asarray(skeleton, dtype=bool)
    if exploration is None:
        exploration = ExplorationMap(skeleton.shape)

    queue = deque(origins)
    edge_count = 0

    while queue:
        step = queue.popleft()
        state = exploration.state(step.pixel)

        if state == ExplorationState.MERGED:
            continue

        if state == ExplorationState.VISITED:
            edge_id = merge_and_add_edge(
                graph, exploration, step.predecessor, step.pixel, include_node_pixels
            )
            edge_count += 1
            edge = graph.edge(edge_id)
            tracer.event(
                f"Edge {edge_id}: {edge.source} -> {edge.target}, {len(edge.waypoints)} waypoints",
                level="DEBUG",
            )
            continue

        exploration.visit(step.pixel, step.predecessor, step.owner)
        if step.is_origin:
            tracer.event(f"Frontier {step.owner} starts at {step.pixel}", level="DEBUG")

        visit_mask = forward_visit_mask(skeleton, step.pixel)
        for index, allowed in enumerate(visit_mask):
            if not allowed:
                continue
            pos = neighbor_at(step.pixel, skeleton.shape, index)
            if pos is None or pos == step.predecessor:
                continue
            if exploration.state(pos) != ExplorationState.UNVISITED:
                continue
            queue.append(FrontierStep(pixel=pos, predecessor=step.pixel, owner=step.owner))

    tracer.event(f"Edges: {edge_count} traced from {len(origins)} frontiers")
    return edge_count
