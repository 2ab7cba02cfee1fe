import numpy as np

from colormark.services.watermarking.blocks import blocks_view
from colormark.services.watermarking.transform import (
    dct2, forward_blocks, idct2, inverse_blocks
)


def _make_plane(size=64, seed=1):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(size, size)).astype(np.float64)


def test_block_roundtrip():
    rng = np.random.default_rng(0)
    for _ in range(20):
        block = rng.uniform(0, 255, size=(8, 8))
        back = idct2(dct2(block))
        assert np.max(np.abs(back - block)) < 1e-9


def test_roundtrip_preserves_8bit_samples():
    block = _make_plane(8)
    back = np.clip(np.round(idct2(dct2(block))), 0, 255)
    assert np.array_equal(back, block)


def test_dct_is_orthonormal():
    block = _make_plane(8, seed=3)
    coeffs = dct2(block)
    assert np.isclose(np.sum(block ** 2), np.sum(coeffs ** 2))

    flat = np.full((8, 8), 100.0)
    c = dct2(flat)
    assert np.isclose(c[0, 0], 800.0)
    c[0, 0] = 0.0
    assert np.allclose(c, 0.0)


def test_forward_and_inverse_over_a_plane():
    plane = _make_plane()
    original = plane.copy()
    blocks = blocks_view(plane, 8)
    coeffs = forward_blocks(blocks)
    assert coeffs.shape == (8, 8, 8, 8)
    assert np.allclose(coeffs[2, 5], dct2(original[16:24, 40:48]))

    plane[:] = 0.0
    inverse_blocks(coeffs, blocks)
    assert np.allclose(plane, original)


def test_threaded_transform_matches_serial():
    plane = _make_plane(128)
    serial = forward_blocks(blocks_view(plane, 8), workers=1)
    threaded = forward_blocks(blocks_view(plane, 8), workers=4)
    assert np.array_equal(serial, threaded)

    a = np.zeros_like(plane)
    b = np.zeros_like(plane)
    inverse_blocks(serial, blocks_view(a, 8), workers=1)
    inverse_blocks(serial, blocks_view(b, 8), workers=4)
    assert np.array_equal(a, b)
