import os
from typing import Union

import cv2
import numpy as np

from colormark.core.errors import DecodeFailure, DimensionMismatch, InvalidParameter

ImageSource = Union[str, os.PathLike, bytes, bytearray, np.ndarray]


def load_rgb_uint8(source: ImageSource) -> np.ndarray:
    """
    Load an image as an (H, W, 3) uint8 RGB array.

    `source` may be a file path, an encoded buffer (PNG, JPEG, ...) or an
    array that is already RGB. Arrays are copied, never aliased.
    """
    if isinstance(source, np.ndarray):
        return _as_rgb_array(source)

    if isinstance(source, (bytes, bytearray)):
        if not source:
            raise DecodeFailure("Could not decode image: empty buffer")
        bgr = cv2.imdecode(np.frombuffer(bytes(source), dtype=np.uint8), cv2.IMREAD_COLOR)
        if bgr is None:
            raise DecodeFailure("Could not decode image buffer")
    else:
        path = os.fspath(source)
        bgr = cv2.imread(path, cv2.IMREAD_COLOR)
        if bgr is None:
            raise DecodeFailure(f"Could not read image: {path}")
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


def _as_rgb_array(arr: np.ndarray) -> np.ndarray:
    if arr.dtype != np.uint8:
        raise InvalidParameter(f"Image arrays must be uint8, got {arr.dtype}")
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise DimensionMismatch(f"Expected an (H, W, 3) RGB array, got shape {arr.shape}")
    # drop alpha if present
    return np.array(arr[:, :, :3], dtype=np.uint8, copy=True)


def save_rgb_uint8(path: str, rgb: np.ndarray) -> None:
    arr = np.clip(np.round(rgb), 0, 255).astype(np.uint8)
    if not cv2.imwrite(os.fspath(path), cv2.cvtColor(arr, cv2.COLOR_RGB2BGR)):
        raise OSError(f"Could not write image: {path}")


def encode_png(rgb: np.ndarray) -> bytes:
    ok, enc = cv2.imencode(".png", cv2.cvtColor(rgb.astype(np.uint8), cv2.COLOR_RGB2BGR))
    if not ok:
        raise OSError("PNG encoding failed")
    return enc.tobytes()


def ensure_square(rgb: np.ndarray, size: int, what: str) -> None:
    h, w = rgb.shape[:2]
    if (h, w) != (size, size):
        raise DimensionMismatch(f"{what} must be {size} * {size}, got {w} * {h}")


# --- Quality metrics ---
def psnr(img_a: np.ndarray, img_b: np.ndarray, max_val: float = 255.0) -> float:
    """
    Peak Signal-to-Noise Ratio (dB). Expects same shape arrays.
    """
    diff = img_a.astype(np.float64) - img_b.astype(np.float64)
    mse = float(np.mean(diff * diff))
    if mse <= 1e-12:
        return 99.0
    return 10.0 * np.log10((max_val * max_val) / mse)


def mean_absolute_error(img_a: np.ndarray, img_b: np.ndarray) -> float:
    """Mean per-sample absolute difference over every pixel and channel."""
    return float(np.mean(np.abs(img_a.astype(np.float64) - img_b.astype(np.float64))))


def sample_accuracy(img_a: np.ndarray, img_b: np.ndarray) -> float:
    """Fraction of samples (pixel, channel) that are identical."""
    return float(np.mean(img_a == img_b))
