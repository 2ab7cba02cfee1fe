"""
Key-seeded choice of carrier coefficients.

Everything random in the scheme is drawn here, once, from a single
``numpy.random.Generator`` seeded by the key. Embedding and extraction build
the same tables independently, so nothing has to be stored next to the
watermarked image except the key and the step size.

Draw order (changing it changes every table):

1. the assignment of the carrier slots of a block onto the carrier planes,
   balanced so every plane carries the same number of slots;
2. for every block and plane, a permutation of the mid-frequency band;
3. a dither offset in [-0.5, 0.5) for every (block, slot), in units of the
   step size.
"""
from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from colormark.core.errors import InvalidParameter

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]

COLOR_CHANNELS = 3


def zigzag_order(size: int = 8) -> List[Coord]:
    coords: List[Coord] = []
    for s in range(0, 2 * size - 1):
        if s % 2 == 0:
            r = min(s, size - 1)
            c = s - r
            while r >= 0 and c < size:
                coords.append((r, c))
                r -= 1
                c += 1
        else:
            c = min(s, size - 1)
            r = s - c
            while c >= 0 and r < size:
                coords.append((r, c))
                r += 1
                c -= 1
    return coords


def seed_sequence(key: int) -> np.random.SeedSequence:
    """Seed material for `key`, read as a 64-bit two's-complement pattern."""
    if isinstance(key, bool):
        raise InvalidParameter("key must be an integer, got bool")
    try:
        key = operator.index(key)
    except TypeError:
        raise InvalidParameter(f"key must be an integer, got {type(key).__name__}") from None
    return np.random.SeedSequence(key % (1 << 64))


@dataclass(frozen=True)
class SelectorState:
    key: int
    # (n_blocks, n_slots, 2) coefficient coordinates
    carriers: np.ndarray
    # (n_slots,) carrier plane of every slot
    channels: np.ndarray
    # (n_blocks, n_slots) dither in units of the step size
    dither: np.ndarray

    @property
    def n_blocks(self) -> int:
        return self.carriers.shape[0]

    @property
    def n_slots(self) -> int:
        return self.carriers.shape[1]


def build_selector(
    key: int,
    n_blocks: int,
    samples_per_block: int,
    n_planes: int = COLOR_CHANNELS,
    band: Tuple[int, int] = (3, 28),
    block_size: int = 8,
) -> SelectorState:
    n_slots = samples_per_block * COLOR_CHANNELS
    if n_planes not in (1, COLOR_CHANNELS):
        raise InvalidParameter(f"n_planes must be 1 or {COLOR_CHANNELS}, got {n_planes}")
    per_plane = n_slots // n_planes

    zigzag = zigzag_order(block_size)
    start, stop = band
    if not (1 <= start < stop <= len(zigzag) - 1):
        raise InvalidParameter(f"band {band} must exclude DC and the highest-frequency corner")
    band_coords = np.array(zigzag[start:stop], dtype=np.intp)
    if len(band_coords) < per_plane:
        raise InvalidParameter(
            f"band {band} has {len(band_coords)} coefficients, each plane block needs {per_plane}"
        )

    rng = np.random.default_rng(seed_sequence(key))

    channels = rng.permutation(np.repeat(np.arange(n_planes), per_plane))
    # rank of each slot among the slots sharing its plane
    ranks = np.array([np.count_nonzero(channels[:s] == channels[s]) for s in range(n_slots)])

    # argsort of uniform noise: an independent permutation per (block, plane)
    order = np.argsort(rng.random((n_blocks, n_planes, len(band_coords))), axis=-1)
    picks = order[:, channels, ranks]
    carriers = band_coords[picks]

    dither = rng.random((n_blocks, n_slots)) - 0.5

    for arr in (carriers, channels, dither):
        arr.setflags(write=False)
    logger.debug(
        "selector tables built: %d blocks, %d slots, %d planes, band %s",
        n_blocks, n_slots, n_planes, band,
    )
    return SelectorState(key=key, carriers=carriers, channels=channels, dither=dither)


def carrier_positions(state: SelectorState, block_index: int) -> np.ndarray:
    """Coefficient coordinates (n_slots, 2) of one block, in slot order."""
    return state.carriers[block_index]


def channel_assignment(state: SelectorState, slot_index: int) -> int:
    return int(state.channels[slot_index])
