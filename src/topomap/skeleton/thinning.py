"""
Free-space thinning for TopoMap.

Reduces the vacancy mask to a one-pixel-wide skeleton with the same shape.
"""

import numpy as np
from skimage.morphology import skeletonize

from topomap.tracer import get_tracer, trace


SKELETON_METHODS = ("zhang", "lee")


@trace(label="thin")
def thin(occupancy_mask, method="zhang"):
    """
    Skeletonize a boolean mask.

    Returns a new bool array; the input is not modified.
    """
    if method not in SKELETON_METHODS:
        raise ValueError(f"Unknown skeleton method {method!r}, expected one of {SKELETON_METHODS}")

    mask = np.asarray(occupancy_mask, dtype=bool)
    if mask.ndim != 2:
        raise ValueError(f"Occupancy mask must be 2D, got shape {mask.shape}")

    if not mask.any():
        return np.zeros_like(mask)

    skeleton = skeletonize(mask, method=method).astype(bool)

    get_tracer().event(f"Skeleton pixels: {int(skeleton.sum())} of {int(mask.sum())} vacant")
    return skeleton
