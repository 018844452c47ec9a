"""
Connected-component seeding of the skeleton.

Splits skeleton pixels into 8-connected components and picks one seed pixel
per component for the node classifier.
"""

from collections import deque

import numpy as np

from topomap.extract.neighborhood import foreground_neighbors
from topomap.tracer import get_tracer, trace


@trace(label="find_seed_points")
def find_seed_points(skeleton):
    """
    Return one (x, y) seed per connected skeleton component.

    Components are discovered in row-major order and each seed is the first
    pixel of its component in that order, so seeds (and the node ids derived
    from them) are reproducible. Every skeleton pixel is visited exactly once.
    """
    tracer = get_tracer()

    skeleton = np.asarray(skeleton, dtype=bool)
    visited = np.zeros_like(skeleton)
    seeds = []

    ys, xs = np.nonzero(skeleton)
    for y, x in zip(ys.tolist(), xs.tolist()):
        if visited[y, x]:
            continue

        seed = (x, y)
        pixels = component_pixels(skeleton, seed)
        for px, py in pixels:
            visited[py, px] = True

        seeds.append(seed)
        tracer.event(f"Seed point #{len(seeds)}: {seed}, {len(pixels)} points connected", level="DEBUG")

    tracer.event(f"Components: {len(seeds)}, skeleton pixels: {int(skeleton.sum())}")
    return seeds


def component_pixels(skeleton, seed):
    """All pixels of the component containing `seed`, in BFS order from it."""
    seen = {seed}
    order = [seed]
    queue = deque([seed])
    while queue:
        pixel = queue.popleft()
        for pos in foreground_neighbors(skeleton, pixel):
            if pos not in seen:
                seen.add(pos)
                order.append(pos)
                queue.append(pos)
    return order
