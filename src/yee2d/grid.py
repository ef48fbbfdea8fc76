from __future__ import annotations
import numpy as np
from dataclasses import dataclass
from typing import Iterable, Tuple


@dataclass(frozen=True)
class Material:
    refractive_index: float = 1.0  # n < 1 is clamped to vacuum

    @property
    def eps_r(self) -> float:
        # relative permittivity, eps_r = n^2 with n >= 1
        n = max(float(self.refractive_index), 1.0)
        return n * n


VACUUM = Material(1.0)


@dataclass(frozen=True)
class GridGeometry:
    """
    Fixed W x H index space. Arrays are stored row-major with shape (H, W),
    so the linear index of cell (x, y) is y * W + x.
    """
    width: int
    height: int

    def __post_init__(self):
        if int(self.width) < 1 or int(self.height) < 1:
            raise ValueError(f'grid must be at least 1x1, got {self.width}x{self.height}')

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    @property
    def size(self) -> int:
        return self.width * self.height

    def index(self, x: int, y: int) -> int:
        return y * self.width + x

    def coords(self, idx: int) -> Tuple[int, int]:
        y, x = divmod(idx, self.width)
        return x, y

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_interior(self, x: int, y: int) -> bool:
        # strictly inside: edge cells are never updated by the Ez formula
        return 1 <= x < self.width - 1 and 1 <= y < self.height - 1

    def is_edge(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and not self.is_interior(x, y)

    def center(self) -> Tuple[int, int]:
        return self.width // 2, self.height // 2


class MaterialMap:
    """
    Per-cell relative permittivity and obstacle (perfect conductor) flag.

    Both maps are numpy arrays of shape (H, W). They are edited in place so
    that tensors sharing their storage (see ``YeeTMz``) always see the
    current material.
    """

    def __init__(self, geometry: GridGeometry):
        self.geometry = geometry
        self.eps_r = np.ones(geometry.shape, dtype=np.float32)
        self.obstacle = np.zeros(geometry.shape, dtype=bool)

    def reset(self) -> None:
        self.eps_r.fill(1.0)
        self.obstacle.fill(False)

    def flat_eps_r(self) -> np.ndarray:
        return self.eps_r.reshape(-1)

    def flat_obstacle(self) -> np.ndarray:
        return self.obstacle.reshape(-1)

    def eps_at(self, x: int, y: int) -> float:
        return float(self.eps_r[y, x])

    def is_obstacle(self, x: int, y: int) -> bool:
        return bool(self.obstacle[y, x])

    def paint_obstacle(self, cells: Iterable[Tuple[int, int]], neutral_eps_r: float = 1.0) -> list:
        """Mark in-bounds cells as obstacles; returns the cells actually painted."""
        painted = []
        for x, y in cells:
            if not self.geometry.in_bounds(x, y):
                continue
            self.obstacle[y, x] = True
            self.eps_r[y, x] = neutral_eps_r
            painted.append((x, y))
        return painted

    def paint_box(self, box, material: Material) -> None:
        # box is (x0, y0, x1, y1), inclusive and already clipped
        if box is None:
            return
        x0, y0, x1, y1 = box
        self.eps_r[y0:y1 + 1, x0:x1 + 1] = material.eps_r
