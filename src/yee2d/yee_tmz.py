from __future__ import annotations
import torch
from torch import Tensor

from .fields import FieldState


class YeeTMz(torch.nn.Module):
        """2D TMz leapfrog update on a unit-spaced Yee grid: Ez (out-of-plane), Hx, Hy.

        Layout: all fields are [H, W] (row = y). The coefficient ``k`` folds
        dt/dx and the Courant number into one constant. ``eps_r`` and
        ``obstacle`` are buffers; when built with ``torch.from_numpy`` they
        share storage with the MaterialMap, so material edits apply on the
        next step.
        """

        def __init__(self, k: float, eps_r: Tensor, obstacle: Tensor):
                super().__init__()
                if eps_r.dim() != 2 or eps_r.shape != obstacle.shape:
                        raise ValueError('eps_r and obstacle must be 2-D tensors of equal shape [H,W]')
                self.k = float(k)
                self.register_buffer('eps_r', eps_r)
                self.register_buffer('obstacle', obstacle)

        def _check(self, fields: FieldState):
                shape = tuple(self.eps_r.shape)
                for name in FieldState.NAMES:
                        if tuple(fields.get(name).shape) != shape:
                                raise ValueError(f'{name} has shape {tuple(fields.get(name).shape)}, expected {shape}')

        @torch.no_grad()
        def magnetic_half_update(self, fields: FieldState):
                """H from Ez (forward differences):

                Hx(i, j+1/2) -= k * (Ez(i, j+1) - Ez(i, j))   for rows 0..H-2
                Hy(i+1/2, j) += k * (Ez(i+1, j) - Ez(i, j))   for columns 0..W-2

                Obstacles do not mask H; they act only through Ez = 0.
                """
                Ez, Hx, Hy = fields.Ez, fields.Hx, fields.Hy
                H, W = Ez.shape
                if H > 1:
                        Hx[:-1, :] -= self.k * (Ez[1:, :] - Ez[:-1, :])
                        # last row has no neighbour above; left untouched
                if W > 1:
                        Hy[:, :-1] += self.k * (Ez[:, 1:] - Ez[:, :-1])

        @torch.no_grad()
        def electric_half_update(self, fields: FieldState):
                """Ez from the centred curl of (Hx, Hy) at interior cells, then Ez = 0 on obstacles.

                Edge cells are never written by the curl term, which makes the
                boundary a fixed (reflecting) one.
                """
                Ez, Hx, Hy = fields.Ez, fields.Hx, fields.Hy
                H, W = Ez.shape
                if H > 2 and W > 2:
                        dHy_dx = Hy[1:-1, 1:-1] - Hy[1:-1, :-2]
                        dHx_dy = Hx[1:-1, 1:-1] - Hx[:-2, 1:-1]
                        Ez[1:-1, 1:-1] += (self.k / self.eps_r[1:-1, 1:-1]) * (dHy_dx - dHx_dy)
                Ez.masked_fill_(self.obstacle, 0.0)

        def step(self, fields: FieldState):
                """One leapfrog step: magnetic half-update, then electric half-update."""
                self._check(fields)
                self.magnetic_half_update(fields)
                self.electric_half_update(fields)
                return fields
