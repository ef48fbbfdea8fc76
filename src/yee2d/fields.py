from __future__ import annotations
import torch
from torch import Tensor

from .grid import GridGeometry


class FieldState:
    """
    TMz fields on a Yee grid, each a float32 tensor of shape (H, W):

    - Ez[y, x]: cell centre (x, y).
    - Hx[y, x]: edge between rows y and y+1, i.e. Hx(x, y+1/2).
    - Hy[y, x]: edge between columns x and x+1, i.e. Hy(x+1/2, y).

    Use ``hx_between_rows`` / ``hy_between_cols`` rather than raw indexing
    when reading H samples next to a cell.
    """

    NAMES = ('Ez', 'Hx', 'Hy')

    def __init__(self, geometry: GridGeometry):
        self.geometry = geometry
        self.Ez = torch.zeros(geometry.shape, dtype=torch.float32)
        self.Hx = torch.zeros_like(self.Ez)
        self.Hy = torch.zeros_like(self.Ez)

    def reset(self) -> None:
        self.Ez.zero_()
        self.Hx.zero_()
        self.Hy.zero_()

    def get(self, name: str) -> Tensor:
        if name not in self.NAMES:
            raise KeyError(f'unknown field {name!r}, expected one of {self.NAMES}')
        return getattr(self, name)

    def flat(self, name: str) -> Tensor:
        # view indexed by y * W + x
        return self.get(name).view(-1)

    def ez(self, x: int, y: int) -> float:
        return float(self.Ez[y, x])

    def hx_between_rows(self, x: int, y: int) -> float:
        """Hx at (x, y+1/2): the edge between row y and row y+1."""
        return float(self.Hx[y, x])

    def hy_between_cols(self, x: int, y: int) -> float:
        """Hy at (x+1/2, y): the edge between column x and column x+1."""
        return float(self.Hy[y, x])

    def centered_h(self, stride: int = 1):
        """
        Average Hx/Hy onto interior Ez centres for vector overlays:
            Hx_c(x, y) = (Hx[y, x] + Hx[y-1, x]) / 2
            Hy_c(x, y) = (Hy[y, x] + Hy[y, x-1]) / 2
        Returns fresh (hx_c, hy_c) tensors of shape ((H-2)/stride, (W-2)/stride),
        covering cells y in [1, H-2], x in [1, W-2]. Display only.
        """
        if stride < 1:
            raise ValueError('stride must be >= 1')
        hx_c = 0.5 * (self.Hx[1:-1, 1:-1] + self.Hx[:-2, 1:-1])
        hy_c = 0.5 * (self.Hy[1:-1, 1:-1] + self.Hy[1:-1, :-2])
        return hx_c[::stride, ::stride].clone(), hy_c[::stride, ::stride].clone()

    def is_finite(self) -> bool:
        return all(bool(torch.isfinite(getattr(self, n)).all()) for n in self.NAMES)

    def stats(self) -> dict:
        out = {}
        for n in self.NAMES:
            t = getattr(self, n)
            out[n] = {
                'min': float(torch.min(t).item()),
                'max': float(torch.max(t).item()),
                'mean': float(torch.mean(t).item()),
                'nonzero': int((t != 0).sum().item()),
            }
        return out

    def energy(self) -> float:
        # unweighted sum of squares; a rough diagnostic, not physical energy
        return float(sum(torch.sum(getattr(self, n).double() ** 2).item() for n in self.NAMES))
