"""
Map loading for TopoMap.

Reads either a map_server style YAML descriptor (image path, resolution,
origin, thresholds) or a bare grayscale image, and returns an OccupancyGrid.
"""

import os

import cv2
import yaml

from topomap.grid.occupancy_grid import CellState, OccupancyGrid
from topomap.models import MapMeta
from topomap.tracer import get_tracer, trace


MAP_YAML_EXTENSIONS = (".yaml", ".yml")


def load_map_info(yaml_path):
    """
    Parse a map YAML file.

    Relative image paths are resolved against the YAML file's directory.
    Raises ValueError when required keys are missing.
    """
    with open(yaml_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if "image" not in data:
        raise ValueError(f"Map file {yaml_path} has no 'image' entry")

    yaml_dir = os.path.dirname(os.path.abspath(yaml_path))
    origin = data.get("origin", [0.0, 0.0, 0.0])

    return {
        "image_path": os.path.join(yaml_dir, data["image"]),
        "resolution": float(data["resolution"]) if "resolution" in data else None,
        "origin": [float(v) for v in origin],
        "negate": bool(int(data.get("negate", 0))),
        "free_thresh": float(data["free_thresh"]) if "free_thresh" in data else None,
        "occupied_thresh": float(data["occupied_thresh"]) if "occupied_thresh" in data else None,
    }


def load_gray_image(path):
    """
    Load an image from disk as a single-channel uint8 array.

    Raises FileNotFoundError if path does not exist.
    Raises ValueError if the image cannot be decoded.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Map image not found: {path}")

    img = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
    if img is None:
        raise ValueError(f"Failed to load map image: {path}")
    return img


@trace(label="load_map")
def load_map(path, config=None):
    """
    Load an occupancy grid from a map YAML or an image file.

    Thresholds stated in a map YAML take precedence over `config.grid`.

    Returns (grid, MapMeta).
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Map not found: {path}")

    free_thresh = config.grid.free_thresh if config else 0.196
    occupied_thresh = config.grid.occupied_thresh if config else 0.65
    negate = config.grid.negate if config else False
    resolution = None
    origin = [0.0, 0.0, 0.0]
    image_path = path

    if path.lower().endswith(MAP_YAML_EXTENSIONS):
        info = load_map_info(path)
        image_path = info["image_path"]
        resolution = info["resolution"]
        origin = info["origin"]
        negate = info["negate"]
        if info["free_thresh"] is not None:
            free_thresh = info["free_thresh"]
        if info["occupied_thresh"] is not None:
            occupied_thresh = info["occupied_thresh"]

    gray = load_gray_image(image_path)
    grid = OccupancyGrid.from_image(
        gray,
        free_thresh=free_thresh,
        occupied_thresh=occupied_thresh,
        negate=negate,
    )

    width, height = grid.dimensions
    tracer.event(f"Loaded map: {width}x{height}, vacant={grid.count(CellState.VACANT)}")

    meta = MapMeta(
        width=width,
        height=height,
        resolution=resolution,
        origin=origin,
        source_path=os.path.abspath(path),
    )
    return grid, meta
