from __future__ import annotations
import numpy as np
from typing import Optional

from .fields import FieldState
from .grid import MaterialMap

OBSTACLE_BYTE = 0
MEDIUM_OFFSET = 128
FIELD_LEVELS = 126  # field bins 1..127


class FrameEncoder:
    """
    Packs Ez and the material map into one byte per cell, row-major:

    - obstacle            -> 0
    - vacuum (eps_r == 1) -> 1..127, floor(((clamp(Ez,-1,1)+1)/2)*126) + 1
    - medium (eps_r > 1)  -> the same value + 128, i.e. 129..255

    128 is never produced, so a consumer can tell vacuum from medium by
    comparing against 128 without decoding the field.
    """

    def __init__(self, fields: FieldState, material: MaterialMap):
        if fields.geometry.shape != material.geometry.shape:
            raise ValueError(f'field shape {fields.geometry.shape} != material shape {material.geometry.shape}')
        self.fields = fields
        self.material = material

    def encode_array(self) -> np.ndarray:
        """Encoded frame as a uint8 array of shape (H, W)."""
        # float64 so the bin edges do not depend on float32 rounding
        ez = self.fields.Ez.detach().cpu().numpy().astype(np.float64)
        m = np.clip(np.nan_to_num(ez, nan=0.0), -1.0, 1.0)
        mapped = np.floor(((m + 1.0) / 2.0) * FIELD_LEVELS).astype(np.int64) + 1
        mapped = np.where(self.material.eps_r > 1.0, mapped + MEDIUM_OFFSET, mapped)
        mapped = np.where(self.material.obstacle, OBSTACLE_BYTE, mapped)
        return mapped.astype(np.uint8)

    def encode(self) -> bytes:
        return self.encode_array().tobytes()


def classify(byte: int) -> str:
    if byte == OBSTACLE_BYTE:
        return 'obstacle'
    if 1 <= byte < MEDIUM_OFFSET:
        return 'vacuum'
    if MEDIUM_OFFSET < byte <= 255:
        return 'medium'
    raise ValueError(f'{byte} is not a valid encoded cell')


def decode_field(byte: int) -> Optional[float]:
    """Lower edge of the Ez bin a byte encodes; None for obstacles."""
    kind = classify(byte)
    if kind == 'obstacle':
        return None
    level = byte - (MEDIUM_OFFSET if kind == 'medium' else 0) - 1
    return 2.0 * level / FIELD_LEVELS - 1.0
