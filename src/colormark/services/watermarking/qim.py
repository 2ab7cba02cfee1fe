"""
Quantization-index modulation with an A-ary alphabet.

Symbol s owns the lattice {(k + s/A + d) * step : k integer}, d being the
carrier's dither. The A lattices interleave with spacing step / A, so a
carrier decodes correctly as long as it moves by less than step / (2A).
"""
import numpy as np

from colormark.core.errors import InvalidParameter


def validate_step_size(step: float) -> None:
    try:
        step = float(step)
    except (TypeError, ValueError):
        raise InvalidParameter(f"step_size must be a number, got {step!r}") from None
    if not np.isfinite(step) or step <= 0:
        raise InvalidParameter(f"step_size must be a positive number, got {step}")


def _scalar_or_array(x: np.ndarray, like):
    if np.ndim(like) == 0:
        return x.item()
    return x


def qim_embed(coefficient, sample, step_size: float, alphabet_size: int = 2, dither=0.0):
    """
    Move `coefficient` to the nearest point of the lattice of `sample`.
    c' = step * round((c - o) / step) + o,  o = (sample / A + d) * step
    """
    validate_step_size(step_size)
    s = np.asarray(sample)
    if np.any((s < 0) | (s >= alphabet_size)) or np.any(s != np.floor(s)):
        raise InvalidParameter(f"samples must be integers in [0, {alphabet_size})")
    c = np.asarray(coefficient, dtype=np.float64)
    offset = (s.astype(np.float64) / alphabet_size + dither) * step_size
    q = np.round((c - offset) / step_size)
    return _scalar_or_array(q * step_size + offset, coefficient)


def qim_extract(coefficient, step_size: float, alphabet_size: int = 2, dither=0.0):
    """
    Symbol whose lattice lies nearest to `coefficient`.
    Ties go to the smaller symbol.
    """
    validate_step_size(step_size)
    # position in units of the interleaved spacing step / A
    t = (np.asarray(coefficient, dtype=np.float64) / step_size - dither) * alphabet_size
    lower = np.floor(t)
    frac = t - lower
    lo = np.mod(lower, alphabet_size).astype(np.int64)
    hi = np.mod(lower + 1, alphabet_size).astype(np.int64)
    symbol = np.where(frac < 0.5, lo, hi)
    symbol = np.where(frac == 0.5, np.minimum(lo, hi), symbol)
    return _scalar_or_array(symbol, coefficient)


def quantize_samples(values: np.ndarray, alphabet_size: int) -> np.ndarray:
    """Map 8-bit samples onto the symbols 0..A-1 (A = 2 thresholds at 127.5)."""
    v = np.asarray(values, dtype=np.float64)
    return np.rint(v * (alphabet_size - 1) / 255.0).astype(np.int64)


def dequantize_symbols(symbols: np.ndarray, alphabet_size: int) -> np.ndarray:
    s = np.asarray(symbols, dtype=np.float64)
    return np.clip(np.rint(s * 255.0 / (alphabet_size - 1)), 0, 255).astype(np.uint8)


def representable_levels(values: np.ndarray, alphabet_size: int) -> np.ndarray:
    """The 8-bit samples an A-ary watermark can actually carry for `values`."""
    return dequantize_symbols(quantize_samples(values, alphabet_size), alphabet_size)
