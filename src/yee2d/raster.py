from __future__ import annotations
from typing import Iterator, Optional, Tuple

from .grid import GridGeometry

Point = Tuple[int, int]
Box = Tuple[int, int, int, int]


def bresenham_line(p1: Point, p2: Point) -> Iterator[Point]:
    """
    Integer cells visited by Bresenham's algorithm from p1 to p2, endpoints
    included. Cells may lie outside the grid; callers clip.
    """
    x0, y0 = int(p1[0]), int(p1[1])
    x1, y1 = int(p2[0]), int(p2[1])
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def clip_box(p1: Point, p2: Point, geometry: GridGeometry) -> Optional[Box]:
    """Inclusive bounding box of p1, p2 clipped to the grid, or None if empty."""
    x0, x1 = sorted((int(p1[0]), int(p2[0])))
    y0, y1 = sorted((int(p1[1]), int(p2[1])))
    x0 = max(x0, 0)
    y0 = max(y0, 0)
    x1 = min(x1, geometry.width - 1)
    y1 = min(y1, geometry.height - 1)
    if x0 > x1 or y0 > y1:
        return None
    return x0, y0, x1, y1


def rect_cells(p1: Point, p2: Point, geometry: GridGeometry) -> Iterator[Point]:
    box = clip_box(p1, p2, geometry)
    if box is None:
        return
    x0, y0, x1, y1 = box
    for y in range(y0, y1 + 1):
        for x in range(x0, x1 + 1):
            yield x, y
