"""
8-neighborhood helpers shared by the seeder, node classifier and edge tracer.

Neighbors are indexed around the rim clockwise starting at north, so even
indices are orthogonal and odd indices are diagonal:

    7 0 1
    6 . 2
    5 4 3
"""

# (dx, dy) per rim index
RIM_OFFSETS = (
    (0, -1),
    (1, -1),
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
)

ORTHOGONAL_INDICES = (0, 2, 4, 6)


def neighbor_at(pixel, shape, index):
    """
    Neighbor of `pixel` ((x, y)) in rim direction `index`.

    `shape` is the mask shape (height, width). Returns None when the neighbor
    falls outside the grid.
    """
    dx, dy = RIM_OFFSETS[index]
    x = pixel[0] + dx
    y = pixel[1] + dy
    if x < 0 or y < 0 or x >= shape[1] or y >= shape[0]:
        return None
    return x, y


def neighbors(pixel, shape):
    """In-bounds neighbors of `pixel` in rim order."""
    for index in range(len(RIM_OFFSETS)):
        pos = neighbor_at(pixel, shape, index)
        if pos is not None:
            yield pos


def foreground_neighbors(skeleton, pixel):
    """Skeleton neighbors of `pixel` in rim order."""
    for x, y in neighbors(pixel, skeleton.shape):
        if skeleton[y, x]:
            yield x, y


def neighbor_mask(skeleton, pixel):
    """Eight flags, one per rim index, True where the neighbor is skeleton."""
    mask = [False] * len(RIM_OFFSETS)
    for index in range(len(RIM_OFFSETS)):
        pos = neighbor_at(pixel, skeleton.shape, index)
        if pos is not None and skeleton[pos[1], pos[0]]:
            mask[index] = True
    return mask


def connectivity_score(skeleton, pixel):
    """
    Estimate how many skeleton arms meet at `pixel`.

    Counts skeleton neighbors, then subtracts one for every pair of
    rim-adjacent neighbors that are both skeleton, since such a pair is a
    single arm touching the pixel at two places.
    """
    mask = neighbor_mask(skeleton, pixel)
    neighbor_count = sum(mask)
    arc_count = sum(1 for i in range(8) if mask[i] and mask[(i + 1) % 8])
    return neighbor_count - arc_count


def is_endpoint_score(score):
    return score <= 1


def is_intersection_score(score):
    return score >= 3


def forward_visit_mask(skeleton, pixel):
    """
    Neighbors a tracing frontier may step to from `pixel`.

    Starts from the skeleton neighbor mask and, for each orthogonal neighbor
    that is skeleton, drops the two diagonals beside it. A diagonal next to an
    orthogonal skeleton pixel is reachable through that pixel, and stepping to
    it directly would trace a second, parallel path.
    """
    mask = neighbor_mask(skeleton, pixel)
    visit = list(mask)
    for index in ORTHOGONAL_INDICES:
        if mask[index]:
            visit[(index - 1) % 8] = False
            visit[(index + 1) % 8] = False
    return visit
