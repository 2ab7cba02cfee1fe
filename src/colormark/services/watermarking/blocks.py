from dataclasses import dataclass
from typing import Tuple

import numpy as np

from colormark.core.errors import InvalidBlockGrid


def blocks_view(plane: np.ndarray, block: int) -> np.ndarray:
    """Return a 4D view (nH, nW, block, block) without copying, raster order."""
    H, W = plane.shape
    if H % block or W % block:
        raise InvalidBlockGrid(f"Plane {W} * {H} is not divisible into {block} * {block} blocks")
    nH, nW = H // block, W // block
    return plane.reshape(nH, block, nW, block).swapaxes(1, 2)


def reassemble(blocks: np.ndarray) -> np.ndarray:
    """Inverse of blocks_view: (nH, nW, b, b) -> (nH * b, nW * b)."""
    nH, nW, bh, bw = blocks.shape
    return blocks.swapaxes(1, 2).reshape(nH * bh, nW * bw)


@dataclass(frozen=True)
class CorrespondenceMap:
    """
    Fixed geometric assignment of watermark pixels to host blocks.

    Each host block carries a `patch_size` * `patch_size` square of watermark
    pixels; `block_index[y, x]` and `slot_index[y, x]` locate pixel (y, x).
    """
    blocks_per_side: int
    patch_size: int
    block_index: np.ndarray
    slot_index: np.ndarray

    @property
    def n_blocks(self) -> int:
        return self.blocks_per_side * self.blocks_per_side

    @property
    def samples_per_block(self) -> int:
        return self.patch_size * self.patch_size

    def pixel_of(self, block_index: int, slot_index: int) -> Tuple[int, int]:
        if not (0 <= block_index < self.n_blocks and 0 <= slot_index < self.samples_per_block):
            raise IndexError(f"No watermark pixel at block {block_index}, slot {slot_index}")
        by, bx = divmod(block_index, self.blocks_per_side)
        sy, sx = divmod(slot_index, self.patch_size)
        return by * self.patch_size + sy, bx * self.patch_size + sx


def correspondence_map(host_dim: int, block_size: int, watermark_dim: int) -> CorrespondenceMap:
    if host_dim % block_size:
        raise InvalidBlockGrid(f"Host size {host_dim} is not a multiple of block size {block_size}")
    per_side = host_dim // block_size
    if watermark_dim < per_side or watermark_dim % per_side:
        raise InvalidBlockGrid(
            f"Watermark size {watermark_dim} is not a multiple of the {per_side} blocks per side"
        )
    patch = watermark_dim // per_side

    ys, xs = np.indices((watermark_dim, watermark_dim))
    block_index = (ys // patch) * per_side + xs // patch
    slot_index = (ys % patch) * patch + xs % patch
    block_index.setflags(write=False)
    slot_index.setflags(write=False)

    return CorrespondenceMap(per_side, patch, block_index, slot_index)
