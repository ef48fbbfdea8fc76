__all__ = [
    "Engine",
    "SimulationConfig",
    "Yee2DError",
    "EngineNotInitializedError",
    "FieldDivergenceError",
    "GridGeometry",
    "Material",
    "MaterialMap",
    "FieldState",
    "YeeTMz",
    "FrameEncoder",
    "bresenham_line",
    "rect_cells",
    "clip_box",
]

from .grid import GridGeometry, Material, MaterialMap
from .fields import FieldState
from .raster import bresenham_line, rect_cells, clip_box
from .yee_tmz import YeeTMz
from .encoder import FrameEncoder
from .engine import (
    Engine,
    SimulationConfig,
    Yee2DError,
    EngineNotInitializedError,
    FieldDivergenceError,
)

__version__ = "0.1.0"
