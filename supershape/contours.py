"""
contours.py - Border following on binary rasters

Raster-scan border following in the manner of Suzuki & Abe (1985):
every outer or hole border start found while scanning row-major is traced
around with a clockwise / counter-clockwise Moore neighbourhood search.
Traced pixels are labelled with the signed border number so they are not
picked up as new starts.
"""
import numpy as np
from typing import List, Optional, Tuple

from .geometry import border_polygon

Pixel = Tuple[int, int]
Border = np.ndarray

# Clockwise Moore neighbourhood, starting north (row, col offsets)
DIR_DELTA = [
    (-1, 0), (-1, 1), (0, 1), (1, 1),
    (1, 0), (1, -1), (0, -1), (-1, -1),
]
EAST = 2


def from_to(src: Pixel, dst: Pixel) -> int:
    """Direction index from one pixel to an adjacent one."""
    return DIR_DELTA.index((dst[0] - src[0], dst[1] - src[1]))


def clockwise(direction: int) -> int:
    return (direction + 1) % 8


def counterclockwise(direction: int) -> int:
    return (direction + 7) % 8


def move(pixel: Pixel, image: np.ndarray, direction: int) -> Optional[Pixel]:
    """Neighbour in `direction` if it is inside the image and non-zero."""
    dr, dc = DIR_DELTA[direction]
    row, col = pixel[0] + dr, pixel[1] + dc
    height, width = image.shape
    if 0 <= row < height and 0 <= col < width and image[row, col] != 0:
        return (row, col)
    return None


def _follow_border(image: np.ndarray, p0: Pixel, p2: Pixel, nbd: int) -> List[Pixel]:
    border: List[Pixel] = []

    # 3.1: first non-zero neighbour clockwise from the seed direction
    direction = from_to(p0, p2)
    moved = clockwise(direction)
    p1 = None
    while moved != direction:
        p1 = move(p0, image, moved)
        if p1 is not None:
            break
        moved = clockwise(moved)
    if p1 is None:
        return border

    # 3.2
    p2, p3 = p1, p0
    last_row = image.shape[0] - 1
    while True:
        # 3.3: counter-clockwise search around p3
        moved = counterclockwise(from_to(p3, p2))
        done = [False] * 8
        while True:
            p4 = move(p3, image, moved)
            if p4 is not None:
                break
            done[moved] = True
            moved = counterclockwise(moved)

        # 3.4
        border.append(p3)
        if p3[0] == last_row or done[EAST]:
            image[p3] = -nbd
        elif image[p3] == 1:
            image[p3] = nbd

        # 3.5
        if p4 == p0 and p3 == p1:
            break
        p2, p3 = p3, p4

    return border


def find_contours(mask: np.ndarray) -> List[Border]:
    """
    Extract every closed border of a binary raster.

    Args:
        mask: 2-D array, non-zero (or True) = foreground, origin top-left

    Returns:
        One (k, 2) int array of (row, col) pixels per border, in discovery
        order. An isolated pixel yields a one-point border; an image with no
        foreground yields an empty list.
    """
    image = (np.asarray(mask) != 0).astype(np.int64)
    if image.ndim != 2:
        raise ValueError(f"Expected a 2-D raster, got shape {image.shape}")

    height, width = image.shape
    contours: List[Border] = []
    nbd = 1

    for i in range(height):
        for j in range(width):
            fji = image[i, j]
            is_outer = fji == 1 and (j == 0 or image[i, j - 1] == 0)
            is_hole = fji >= 1 and (j == width - 1 or image[i, j + 1] == 0)

            if is_outer or is_hole:
                nbd += 1
                if is_outer:
                    seed = (i, j - 1)
                else:
                    seed = (i, j + 1)

                border = _follow_border(image, (i, j), seed, nbd)
                if not border:
                    border = [(i, j)]
                    image[i, j] = -nbd
                contours.append(np.array(border, dtype=np.int64))

    return contours


def border_to_xy(border: Border) -> Tuple[np.ndarray, np.ndarray]:
    """Split a border into x (row) and y (column) coordinate arrays."""
    border = np.asarray(border, dtype=np.float64).reshape(-1, 2)
    return border[:, 0].copy(), border[:, 1].copy()


def pick_border(borders: List[Border], strategy: str = "first") -> Border:
    """
    Choose the border to fit against.

    "first" keeps discovery order (the outermost border of the top-most
    object), "longest" the border with most pixels, "largest" the border
    enclosing the largest area.
    """
    if not borders:
        raise ValueError("No borders found in raster")

    if strategy == "first":
        return borders[0]
    elif strategy == "longest":
        return max(borders, key=len)
    elif strategy == "largest":
        return max(borders, key=lambda b: border_polygon(b).area)
    raise ValueError(f"Unknown border strategy: {strategy}")
