"""Source waveforms and prebuilt scenes for drivers.

The engine has no notion of frequency: a driver computes a source value
from ``engine.clock`` with one of the waveforms below and passes it to
``add_source`` every tick.
"""

from __future__ import annotations
import math
from typing import Tuple

from .engine import Engine


def continuous_wave(t: float, frequency: float, amplitude: float = 1.0, ramp: float = 0.0) -> float:
    # ramp > 0 fades the amplitude in linearly over `ramp` time units
    env = min(1.0, t / ramp) if ramp > 0 else 1.0
    return amplitude * env * math.sin(2.0 * math.pi * frequency * t)


def gaussian_pulse(t: float, t0: float, spread: float, amplitude: float = 1.0) -> float:
    return amplitude * math.exp(-0.5 * ((t - t0) / spread) ** 2)


def fiber_cross_section(engine: Engine, core_index: float = 1.5, cladding_index: float = 1.2,
                        core_width: int = None, cladding_width: int = None,
                        jacket: bool = True) -> Tuple[int, int]:
    """
    Paint a horizontal step-index fiber across the grid: cladding band first,
    then the core band inside it (later rectangles overwrite earlier ones).
    With ``jacket`` the outer faces of the cladding become reflecting
    obstacle lines.

    Returns:
        (x, y) of a source cell at the left end of the core.
    """
    W, H = engine.geometry.width, engine.geometry.height
    cy = H // 2
    if cladding_width is None:
        cladding_width = max(3, H // 3)
    if core_width is None:
        core_width = max(1, cladding_width // 3)
    clad_top = cy - cladding_width // 2
    clad_bot = clad_top + cladding_width - 1
    core_top = cy - core_width // 2
    core_bot = core_top + core_width - 1

    engine.add_medium_rect((0, clad_top), (W - 1, clad_bot), cladding_index)
    engine.add_medium_rect((0, core_top), (W - 1, core_bot), core_index)
    if jacket:
        engine.add_obstacle_line((0, clad_top - 1), (W - 1, clad_top - 1))
        engine.add_obstacle_line((0, clad_bot + 1), (W - 1, clad_bot + 1))
    return min(2, W - 2), cy


def double_slit(engine: Engine, wall_x: int = None, slit_width: int = 4,
                slit_separation: int = 20) -> Tuple[int, int]:
    """
    Vertical obstacle wall with two openings centred on the middle row.

    Returns:
        (x, y) of a source cell left of the wall.
    """
    W, H = engine.geometry.width, engine.geometry.height
    if wall_x is None:
        wall_x = W // 3
    cy = H // 2
    half = slit_separation // 2
    upper = (cy - half - slit_width // 2, cy - half + (slit_width - 1) // 2)
    lower = (cy + half - slit_width // 2, cy + half + (slit_width - 1) // 2)

    engine.add_obstacle_line((wall_x, 0), (wall_x, upper[0] - 1))
    engine.add_obstacle_line((wall_x, upper[1] + 1), (wall_x, lower[0] - 1))
    engine.add_obstacle_line((wall_x, lower[1] + 1), (wall_x, H - 1))
    return max(1, wall_x // 2), cy


SCENES = {
    'fiber': fiber_cross_section,
    'double-slit': double_slit,
}
