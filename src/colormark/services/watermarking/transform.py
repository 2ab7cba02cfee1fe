from concurrent.futures import ThreadPoolExecutor
from typing import Callable

import cv2
import numpy as np


def dct2(block: np.ndarray) -> np.ndarray:
    # Orthonormal DCT-II; OpenCV wants a contiguous float array
    return cv2.dct(np.ascontiguousarray(block, dtype=np.float64))


def idct2(coeffs: np.ndarray) -> np.ndarray:
    return cv2.idct(np.ascontiguousarray(coeffs, dtype=np.float64))


def _map_rows(fn: Callable[[int], None], n_rows: int, workers: int) -> None:
    if workers <= 1:
        for i in range(n_rows):
            fn(i)
        return
    # rows touch disjoint memory; leaving the pool is the only barrier
    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(fn, range(n_rows)))


def forward_blocks(blocks: np.ndarray, workers: int = 1) -> np.ndarray:
    """DCT of every block of a (nH, nW, b, b) view; returns a new array."""
    nH, nW = blocks.shape[:2]
    coeffs = np.empty(blocks.shape, dtype=np.float64)

    def _row(i: int) -> None:
        for j in range(nW):
            coeffs[i, j] = dct2(blocks[i, j])

    _map_rows(_row, nH, workers)
    return coeffs


def inverse_blocks(coeffs: np.ndarray, out_blocks: np.ndarray, workers: int = 1) -> np.ndarray:
    """
    Inverse DCT of every coefficient block, written through `out_blocks`.

    `out_blocks` is normally a blocks_view of a plane, so the plane itself is
    updated in place.
    """
    nH, nW = coeffs.shape[:2]

    def _row(i: int) -> None:
        for j in range(nW):
            out_blocks[i, j] = idct2(coeffs[i, j])

    _map_rows(_row, nH, workers)
    return out_blocks
