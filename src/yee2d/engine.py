"""Simulation engine: owns the grid, material, fields and clock.

A driver calls ``step(dt)`` once per simulation tick, the editing operations
on user input, and ``encode()`` once per render tick. Nothing here is
thread-safe; the driver serializes calls.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import wraps
from typing import Optional, Tuple

import torch

from .encoder import FrameEncoder
from .fields import FieldState
from .grid import GridGeometry, Material, MaterialMap
from .raster import bresenham_line, clip_box
from .yee_tmz import YeeTMz

logger = logging.getLogger(__name__)

COURANT_LIMIT_2D = 1.0 / math.sqrt(2.0)


class Yee2DError(Exception):
    """Base class for errors raised by yee2d."""


class EngineNotInitializedError(Yee2DError, RuntimeError):
    """An operation was called before ``Engine.initialize``."""


class FieldDivergenceError(Yee2DError, FloatingPointError):
    """Fields contain non-finite or runaway values."""


@dataclass
class SimulationConfig:
    courant_number: float = 0.5
    time_scale: float = 0.2
    neutral_eps_r: float = 1.0
    divergence_guard: bool = False
    divergence_limit: float = 1e6

    @property
    def k(self) -> float:
        return self.courant_number * self.time_scale

    def validate(self) -> "SimulationConfig":
        if not 0.0 < self.courant_number < COURANT_LIMIT_2D:
            raise ValueError(
                f'courant_number must be in (0, {COURANT_LIMIT_2D:.4f}), got {self.courant_number}')
        if self.time_scale <= 0.0:
            raise ValueError(f'time_scale must be positive, got {self.time_scale}')
        if self.neutral_eps_r < 1.0:
            raise ValueError(f'neutral_eps_r must be >= 1, got {self.neutral_eps_r}')
        if self.divergence_limit <= 0.0:
            raise ValueError(f'divergence_limit must be positive, got {self.divergence_limit}')
        return self


def _requires_init(method):
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        if self.geometry is None:
            raise EngineNotInitializedError(
                f'Engine.{method.__name__}() called before Engine.initialize()')
        return method(self, *args, **kwargs)
    return wrapper


class Engine:
    """
    2-D FDTD engine.

    Args:
        config: SimulationConfig; validated on construction.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = (config or SimulationConfig()).validate()
        self.geometry: Optional[GridGeometry] = None
        self.material: Optional[MaterialMap] = None
        self.fields: Optional[FieldState] = None
        self.updater: Optional[YeeTMz] = None
        self.encoder: Optional[FrameEncoder] = None
        self.clock = 0.0
        self.step_count = 0
        self._diverged = False

    @staticmethod
    def with_size(width: int, height: int, config: Optional[SimulationConfig] = None) -> "Engine":
        engine = Engine(config)
        engine.initialize(width, height)
        return engine

    @property
    def initialized(self) -> bool:
        return self.geometry is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, width: int, height: int) -> None:
        """Allocate fields and material at W x H, all at defaults, clock = 0."""
        self.geometry = GridGeometry(int(width), int(height))
        self.material = MaterialMap(self.geometry)
        self.fields = FieldState(self.geometry)
        self.updater = YeeTMz(
            self.config.k,
            eps_r=torch.from_numpy(self.material.eps_r),
            obstacle=torch.from_numpy(self.material.obstacle),
        )
        self.encoder = FrameEncoder(self.fields, self.material)
        self.clock = 0.0
        self.step_count = 0
        self._diverged = False
        logger.debug('initialized %dx%d grid, k=%.4f', width, height, self.config.k)

    @_requires_init
    def reset(self) -> None:
        # in-place, so the updater's shared buffers stay valid
        self.material.reset()
        self.fields.reset()
        self.clock = 0.0
        self.step_count = 0
        self._diverged = False
        logger.debug('reset %dx%d grid', self.geometry.width, self.geometry.height)

    # ------------------------------------------------------------------
    # Time stepping
    # ------------------------------------------------------------------

    @_requires_init
    def step(self, dt: float) -> None:
        self.clock += dt * self.config.time_scale
        self.updater.step(self.fields)
        self.step_count += 1
        if self.config.divergence_guard:
            self.check_divergence()

    @_requires_init
    def check_divergence(self, raise_on_error: bool = False) -> bool:
        """
        Count non-finite and over-limit samples. Logs one warning per
        divergence episode and never alters the fields.

        Returns:
            True if the fields look healthy.
        """
        bad = {}
        limit = self.config.divergence_limit
        for name in FieldState.NAMES:
            t = self.fields.get(name)
            n_bad = int((~torch.isfinite(t)).sum().item()) + int((t.abs() > limit).sum().item())
            if n_bad:
                bad[name] = n_bad
        if not bad:
            self._diverged = False
            return True
        if not self._diverged:
            logger.warning(
                'field divergence at step %d (t=%.4g): %s bad samples (limit %.1e)',
                self.step_count, self.clock, bad, limit,
            )
        self._diverged = True
        if raise_on_error:
            raise FieldDivergenceError(f'fields diverged at step {self.step_count}: {bad}')
        return False

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    @_requires_init
    def add_source(self, x: int, y: int, strength: float) -> None:
        """Hard source: overwrite Ez at an interior cell; anything else is ignored."""
        x, y = int(x), int(y)
        if not self.geometry.is_interior(x, y):
            return
        self.fields.Ez[y, x] = float(strength)

    @_requires_init
    def add_line_source(self, p1: Tuple[int, int], p2: Tuple[int, int], strength: float) -> None:
        for x, y in bresenham_line(p1, p2):
            self.add_source(x, y, strength)

    @_requires_init
    def add_obstacle_line(self, p1: Tuple[int, int], p2: Tuple[int, int]) -> None:
        painted = self.material.paint_obstacle(bresenham_line(p1, p2), self.config.neutral_eps_r)
        for x, y in painted:
            self.fields.Ez[y, x] = 0.0

    @_requires_init
    def add_medium_rect(self, p1: Tuple[int, int], p2: Tuple[int, int], refractive_index: float) -> None:
        """Set eps_r = max(n, 1)^2 over the clipped box. Later calls overwrite earlier ones."""
        self.material.paint_box(clip_box(p1, p2, self.geometry), Material(refractive_index))

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @_requires_init
    def encode(self) -> bytes:
        return self.encoder.encode()
