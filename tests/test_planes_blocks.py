import numpy as np
import pytest

from colormark.core.errors import DimensionMismatch, InvalidBlockGrid
from colormark.services.watermarking.blocks import blocks_view, correspondence_map, reassemble
from colormark.services.watermarking.planes import (
    join_planes, rgb_to_ycbcr, split_planes, ycbcr_to_rgb
)


def _make_rgb(w=64, h=64, seed=0):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)


def test_split_join_is_lossless():
    img = _make_rgb()
    r, g, b = split_planes(img)
    assert r.dtype == np.float64
    out = join_planes(r, g, b)
    assert out.dtype == np.uint8
    assert np.array_equal(out, img)


def test_split_planes_do_not_alias_the_image():
    img = _make_rgb()
    r, _, _ = split_planes(img)
    r[:] = 0
    assert img[:, :, 0].any()


def test_split_rejects_wrong_size_and_shape():
    with pytest.raises(DimensionMismatch):
        split_planes(_make_rgb(64, 32), size=64)
    with pytest.raises(DimensionMismatch):
        split_planes(np.zeros((64, 64), dtype=np.uint8))


def test_join_clamps_and_rounds():
    p = np.array([[-3.2, 254.6, 300.0]])
    out = join_planes(p, p, p)
    assert out[0, :, 0].tolist() == [0, 255, 255]


def test_ycbcr_roundtrip_is_close():
    img = _make_rgb()
    planes = split_planes(img)
    y, cb, cr = rgb_to_ycbcr(*planes)
    # grey pixels have neutral chroma
    grey = np.full((8, 8, 3), 100, dtype=np.uint8)
    gy, gcb, gcr = rgb_to_ycbcr(*split_planes(grey))
    assert np.allclose(gy, 100.0, atol=1e-3)
    assert np.allclose(gcb, gcr, atol=1e-3)
    assert np.array_equal(join_planes(*ycbcr_to_rgb(y, cb, cr)), img)


def test_blocks_view_is_raster_ordered_view():
    plane = np.arange(16 * 24, dtype=np.float64).reshape(16, 24)
    blocks = blocks_view(plane, 8)
    assert blocks.shape == (2, 3, 8, 8)
    assert np.array_equal(blocks[0, 1], plane[0:8, 8:16])
    assert np.array_equal(blocks[1, 2], plane[8:16, 16:24])
    blocks[1, 0] = -1.0
    assert (plane[8:16, 0:8] == -1.0).all()
    assert np.array_equal(reassemble(blocks), plane)


def test_blocks_view_rejects_uneven_grid():
    with pytest.raises(InvalidBlockGrid):
        blocks_view(np.zeros((20, 16)), 8)


def test_correspondence_map_is_a_bijection():
    cmap = correspondence_map(512, 8, 128)
    assert cmap.blocks_per_side == 64
    assert cmap.patch_size == 2
    assert cmap.n_blocks * cmap.samples_per_block == 128 * 128

    pairs = cmap.block_index.ravel() * cmap.samples_per_block + cmap.slot_index.ravel()
    assert np.array_equal(np.sort(pairs), np.arange(128 * 128))

    for y, x in [(0, 0), (0, 1), (1, 0), (5, 77), (127, 127)]:
        b, s = int(cmap.block_index[y, x]), int(cmap.slot_index[y, x])
        assert cmap.pixel_of(b, s) == (y, x)


def test_correspondence_map_geometry():
    cmap = correspondence_map(512, 8, 128)
    # pixel (3, 5) sits in block row 1, block col 2, lower-right slot
    assert cmap.block_index[3, 5] == 1 * 64 + 2
    assert cmap.slot_index[3, 5] == 3


def test_correspondence_map_rejects_inconsistent_sizes():
    with pytest.raises(InvalidBlockGrid):
        correspondence_map(500, 8, 128)
    with pytest.raises(InvalidBlockGrid):
        correspondence_map(512, 8, 100)
    with pytest.raises(InvalidBlockGrid):
        correspondence_map(512, 8, 32)
