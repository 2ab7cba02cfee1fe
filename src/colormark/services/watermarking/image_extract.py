import logging
from typing import Optional

import numpy as np

from colormark.services.watermarking.blocks import blocks_view
from colormark.services.watermarking.helpers import ImageSource, load_rgb_uint8, ensure_square
from colormark.services.watermarking.image_embed import carrier_layout
from colormark.services.watermarking.planes import split_for_embedding
from colormark.services.watermarking.qim import dequantize_symbols, qim_extract, validate_step_size
from colormark.services.watermarking.schemas import WatermarkConfig
from colormark.services.watermarking.transform import forward_blocks

logger = logging.getLogger(__name__)


def extract_symbols(
    image: ImageSource,
    key: int,
    step_size: float,
    cfg: Optional[WatermarkConfig] = None
) -> np.ndarray:
    """
    Decode the raw QIM symbols, shaped (wm, wm, 3), without mapping them back
    to 8-bit samples.
    """
    cfg = cfg or WatermarkConfig()
    validate_step_size(step_size)
    rgb = load_rgb_uint8(image)
    ensure_square(rgb, cfg.host_size, "Watermarked image")
    layout = carrier_layout(cfg, key)

    planes = split_for_embedding(rgb, cfg.color_space)
    coeffs = np.stack([
        forward_blocks(blocks_view(p, cfg.block_size), cfg.workers)
        for p in planes[: cfg.carrier_planes]
    ])
    return qim_extract(coeffs[layout.index], step_size, cfg.alphabet_size, layout.dither)


def extract_watermark(
    image: ImageSource,
    key: int,
    step_size: float,
    cfg: Optional[WatermarkConfig] = None
) -> np.ndarray:
    """
    Recover the colour watermark embedded by `embed_watermark`.

    `key`, `step_size` and `cfg` must match the embedding call; with any other
    key the result is noise. No inverse transform of the host is needed.
    """
    cfg = cfg or WatermarkConfig()
    symbols = extract_symbols(image, key, step_size, cfg)
    watermark = dequantize_symbols(symbols, cfg.alphabet_size)
    logger.info(
        "extracted %d * %d watermark (alphabet %d, step %.2f, %s)",
        cfg.watermark_size, cfg.watermark_size, cfg.alphabet_size, step_size,
        cfg.color_space.value,
    )
    return watermark
