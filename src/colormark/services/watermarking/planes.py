from typing import Tuple

import cv2
import numpy as np

from colormark.core.errors import DimensionMismatch
from colormark.services.watermarking.schemas import ColorSpace

Planes = Tuple[np.ndarray, np.ndarray, np.ndarray]


def split_planes(rgb: np.ndarray, size: int | None = None) -> Planes:
    """
    Split an (H, W, 3) RGB image into three independent float64 planes.
    With `size` given the image must also be size * size.
    """
    if rgb.ndim != 3 or rgb.shape[2] != 3:
        raise DimensionMismatch(f"Expected an (H, W, 3) image, got shape {rgb.shape}")
    if size is not None and rgb.shape[:2] != (size, size):
        h, w = rgb.shape[:2]
        raise DimensionMismatch(f"Image must be {size} * {size}, got {w} * {h}")
    return tuple(np.array(rgb[:, :, c], dtype=np.float64) for c in range(3))


def join_planes(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Round, clamp to [0, 255] and stack planes back into a uint8 RGB image."""
    rgb = np.stack([r, g, b], axis=-1)
    return np.clip(np.round(rgb), 0, 255).astype(np.uint8)


def rgb_to_ycbcr(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> Planes:
    """
    Full-range YCbCr in float, using OpenCV's conversion on [0, 1] data.
    Note: OpenCV order is Y, Cr, Cb. We return (Y, Cb, Cr).
    """
    x = (np.stack([r, g, b], axis=-1) / 255.0).astype(np.float32)
    ycrcb = cv2.cvtColor(x, cv2.COLOR_RGB2YCrCb).astype(np.float64) * 255.0
    return ycrcb[:, :, 0].copy(), ycrcb[:, :, 2].copy(), ycrcb[:, :, 1].copy()


def ycbcr_to_rgb(y: np.ndarray, cb: np.ndarray, cr: np.ndarray) -> Planes:
    """Inverse of rgb_to_ycbcr; output planes are float, not clamped."""
    x = (np.stack([y, cr, cb], axis=-1) / 255.0).astype(np.float32)  # OpenCV expects Y,Cr,Cb
    rgb = cv2.cvtColor(x, cv2.COLOR_YCrCb2RGB).astype(np.float64) * 255.0
    return rgb[:, :, 0].copy(), rgb[:, :, 1].copy(), rgb[:, :, 2].copy()


def split_for_embedding(rgb: np.ndarray, color_space: ColorSpace, size: int | None = None) -> Planes:
    """Planes in the working colour space; carriers live in the leading planes."""
    planes = split_planes(rgb, size)
    if color_space == ColorSpace.LUMA:
        return rgb_to_ycbcr(*planes)
    return planes


def join_from_embedding(planes: Planes, color_space: ColorSpace) -> np.ndarray:
    if color_space == ColorSpace.LUMA:
        return join_planes(*ycbcr_to_rgb(*planes))
    return join_planes(*planes)
