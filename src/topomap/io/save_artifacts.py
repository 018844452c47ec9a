"""
Artifact saving utilities for TopoMap.

Writes the topology JSON, debug images of the skeleton and the extracted
graph, and per-stage metrics.
"""

import json
import os

import cv2
import numpy as np

from topomap.models import TopologyNodeType
from topomap.tracer import get_tracer


# BGR
NODE_COLORS = {
    TopologyNodeType.ENDPOINT: (0, 200, 0),
    TopologyNodeType.INTERSECTION: (0, 0, 255),
    TopologyNodeType.WAYPOINT: (255, 128, 0),
}


def ensure_dir(path):
    """Create directory if it does not exist."""
    os.makedirs(path, exist_ok=True)


def get_debug_dir(out_dir, map_id, stage_name):
    """
    Get the debug directory path for a stage, creating it if needed.
    """
    debug_dir = os.path.join(out_dir, "debug", map_id, stage_name)
    ensure_dir(debug_dir)
    return debug_dir


def save_image(img, path, max_edge=None):
    """
    Save an image to disk.

    Boolean masks are written as black/white. Optionally downscales to
    `max_edge` while preserving aspect ratio (nearest neighbour, so one-pixel
    skeleton lines survive).
    """
    tracer = get_tracer()

    if img.dtype == bool:
        img = img.astype(np.uint8) * 255

    if max_edge and max(img.shape[:2]) > max_edge:
        scale = max_edge / max(img.shape[:2])
        new_size = (int(img.shape[1] * scale), int(img.shape[0] * scale))
        img = cv2.resize(img, new_size, interpolation=cv2.INTER_NEAREST)

    ensure_dir(os.path.dirname(path))
    cv2.imwrite(path, img)
    tracer.event(f"Saved image: {path}")


def save_json(data, path, indent=2):
    """
    Save a dictionary or Pydantic model to JSON.
    """
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path))

    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)

    tracer.event(f"Saved JSON: {path}")


def _edge_color(index, count):
    hue = int(180 * index / max(count, 1))
    hsv = np.uint8([[[hue, 200, 230]]])
    return tuple(int(c) for c in cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)[0, 0])


def draw_topology_overlay(skeleton, graph, scale=4):
    """
    Render the graph on top of the skeleton.

    The skeleton is drawn dark gray, each edge in its own color (node
    positions included so arcs touch their nodes), and nodes as dots colored
    by type. Returns a BGR image `scale` times the mask size.
    """
    height, width = skeleton.shape
    base = np.where(np.asarray(skeleton, dtype=bool), 80, 0).astype(np.uint8)
    base = cv2.resize(base, (width * scale, height * scale), interpolation=cv2.INTER_NEAREST)
    overlay = cv2.cvtColor(base, cv2.COLOR_GRAY2BGR)

    def to_canvas(point):
        return int(point[0] * scale + scale // 2), int(point[1] * scale + scale // 2)

    edges = graph.edges()
    for i, edge in enumerate(edges):
        points = [graph.node(edge.source).position] + list(edge.waypoints) + [graph.node(edge.target).position]
        pts = np.array([to_canvas(p) for p in points], dtype=np.int32)
        cv2.polylines(overlay, [pts], isClosed=False, color=_edge_color(i, len(edges)), thickness=1)

    radius = max(2, scale // 2 + 1)
    for node in graph.nodes():
        cv2.circle(overlay, to_canvas(node.position), radius, NODE_COLORS[node.node_type], -1)

    return overlay


class DebugArtifactWriter:
    """
    Writes debug artifacts for a single map under out/debug/<map_id>/.

    Its `observe_skeleton` method is meant to be passed as the extractor's
    skeleton observer.
    """

    def __init__(self, out_dir, map_id, enabled=True, max_edge=1600):
        self.out_dir = out_dir
        self.map_id = map_id
        self.enabled = enabled
        self.max_edge = max_edge

    def get_stage_dir(self, stage_name):
        return get_debug_dir(self.out_dir, self.map_id, stage_name)

    def save_image(self, img, stage_name, filename):
        if not self.enabled:
            return
        path = os.path.join(self.get_stage_dir(stage_name), filename)
        save_image(img, path, max_edge=self.max_edge)

    def save_json(self, data, stage_name, filename):
        if not self.enabled:
            return
        path = os.path.join(self.get_stage_dir(stage_name), filename)
        save_json(data, path)

    def observe_skeleton(self, skeleton):
        """Save the thinned mask and its pixel count."""
        self.save_image(skeleton, "skeleton", "01_skeleton.png")
        self.save_json(
            {"skeleton_pixels": int(np.count_nonzero(skeleton)), "shape": list(skeleton.shape)},
            "skeleton",
            "skeleton_metrics.json",
        )

    def save_topology_overlay(self, skeleton, graph):
        if not self.enabled:
            return
        overlay = draw_topology_overlay(skeleton, graph)
        self.save_image(overlay, "topology", "01_topology_overlay.png")
