import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from colormark.services.watermarking.blocks import blocks_view, correspondence_map
from colormark.services.watermarking.helpers import (
    ImageSource, load_rgb_uint8, ensure_square, psnr
)
from colormark.services.watermarking.planes import join_from_embedding, split_for_embedding, ycbcr_to_rgb
from colormark.services.watermarking.qim import qim_embed, quantize_samples, validate_step_size
from colormark.services.watermarking.schemas import ColorSpace, WatermarkConfig
from colormark.services.watermarking.selector import COLOR_CHANNELS, build_selector
from colormark.services.watermarking.transform import forward_blocks, inverse_blocks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CarrierLayout:
    """
    Where every watermark sample lives, as arrays shaped like the watermark
    (wm, wm, 3): carrier plane, block row/col, coefficient (u, v), dither.
    """
    plane: np.ndarray
    block_row: np.ndarray
    block_col: np.ndarray
    u: np.ndarray
    v: np.ndarray
    dither: np.ndarray

    @property
    def index(self) -> Tuple[np.ndarray, ...]:
        """Fancy index into a (planes, nH, nW, b, b) coefficient stack."""
        return self.plane, self.block_row, self.block_col, self.u, self.v


def carrier_layout(cfg: WatermarkConfig, key: int) -> CarrierLayout:
    cmap = correspondence_map(cfg.host_size, cfg.block_size, cfg.watermark_size)
    state = build_selector(
        key,
        n_blocks=cmap.n_blocks,
        samples_per_block=cmap.samples_per_block,
        n_planes=cfg.carrier_planes,
        band=cfg.band,
        block_size=cfg.block_size,
    )

    # carrier slot = pixel slot * 3 + colour channel
    slot = cmap.slot_index[:, :, None] * COLOR_CHANNELS + np.arange(COLOR_CHANNELS)
    block = np.broadcast_to(cmap.block_index[:, :, None], slot.shape)
    coords = state.carriers[block, slot]

    return CarrierLayout(
        plane=state.channels[slot],
        block_row=block // cmap.blocks_per_side,
        block_col=block % cmap.blocks_per_side,
        u=coords[..., 0],
        v=coords[..., 1],
        dither=state.dither[block, slot],
    )


def _block_extremes(planes, block: int) -> Tuple[np.ndarray, np.ndarray]:
    """Per-block min and max over one or more (H, W) planes."""
    stack = np.stack(planes)
    n, H, W = stack.shape
    tiles = stack.reshape(n, H // block, block, W // block, block)
    return tiles.min(axis=(0, 2, 4)), tiles.max(axis=(0, 2, 4))


def fit_blocks_to_range(planes, color_space: ColorSpace, block: int, lo: float = 0.0, hi: float = 255.0) -> int:
    """
    Shift every block that would leave [lo, hi] once back in RGB.

    Only the block mean moves, i.e. the DC coefficient, which never carries a
    sample, so clamping at join time no longer eats the QIM displacement of
    saturated regions. A block whose span exceeds hi - lo is centred instead.
    Planes are modified in place; returns the number of shifted blocks.
    """
    if color_space == ColorSpace.LUMA:
        # a Y offset moves R, G and B by the same amount
        groups = [(planes[0], ycbcr_to_rgb(*planes))]
    else:
        groups = [(p, (p,)) for p in planes]

    shifted = 0
    for target, spans in groups:
        low, high = _block_extremes(spans, block)
        up = np.maximum(lo - low, 0.0)
        down = np.minimum(hi - high, 0.0)
        shift = np.where(high - low > hi - lo, (lo + hi - low - high) / 2, up + down)
        blocks_view(target, block)[...] += shift[:, :, None, None]
        shifted += int(np.count_nonzero(shift))
    return shifted


def embed_watermark(
    host: ImageSource,
    watermark: ImageSource,
    key: int,
    step_size: float,
    cfg: Optional[WatermarkConfig] = None
) -> np.ndarray:
    """
    Embed the colour `watermark` into `host` with DCT + QIM.

    Higher `step_size` survives stronger compression but is more visible.
    Returns a new uint8 RGB array; `host` is never modified.
    """
    cfg = cfg or WatermarkConfig()
    validate_step_size(step_size)
    host_rgb = load_rgb_uint8(host)
    ensure_square(host_rgb, cfg.host_size, "Host image")
    wm_rgb = load_rgb_uint8(watermark)
    ensure_square(wm_rgb, cfg.watermark_size, "Watermark image")
    layout = carrier_layout(cfg, key)

    planes = split_for_embedding(host_rgb, cfg.color_space)
    carrier_blocks = [blocks_view(p, cfg.block_size) for p in planes[: cfg.carrier_planes]]
    coeffs = np.stack([forward_blocks(b, cfg.workers) for b in carrier_blocks])

    symbols = quantize_samples(wm_rgb, cfg.alphabet_size)
    idx = layout.index
    coeffs[idx] = qim_embed(coeffs[idx], symbols, step_size, cfg.alphabet_size, layout.dither)

    # write back through the block views into the planes
    for p, blocks in enumerate(carrier_blocks):
        inverse_blocks(coeffs[p], blocks, cfg.workers)

    shifted = fit_blocks_to_range(planes, cfg.color_space, cfg.block_size)
    if shifted:
        logger.debug("shifted %d saturated blocks back into range", shifted)

    watermarked = join_from_embedding(planes, cfg.color_space)
    logger.info(
        "embedded %d samples (alphabet %d, step %.2f, %s): PSNR %.2f dB",
        symbols.size, cfg.alphabet_size, step_size, cfg.color_space.value,
        psnr(host_rgb, watermarked),
    )
    return watermarked
