import argparse
import logging
import sys
from dataclasses import replace

from colormark.core.config import configure_logging, settings
from colormark.core.errors import WatermarkError
from colormark.services.watermarking.helpers import save_rgb_uint8
from colormark.services.watermarking.image_embed import embed_watermark
from colormark.services.watermarking.schemas import ColorSpace

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Embed a colour watermark into a host image")
    p.add_argument("--host", required=True, help=f"Host image ({settings.host_size} * {settings.host_size})")
    p.add_argument("--watermark", required=True,
                   help=f"Watermark image ({settings.watermark_size} * {settings.watermark_size})")
    p.add_argument("--out", dest="out", required=True, help="Output watermarked image path (use a lossless format)")
    p.add_argument("--key", type=int, required=True, help="Integer key, needed again for extraction")
    p.add_argument("--step", type=float, default=settings.default_step_size, help="QIM step (strength)")
    p.add_argument("--alphabet", type=int, default=settings.alphabet_size,
                   help="Quantization levels per colour sample")
    p.add_argument("--color-space", choices=[c.value for c in ColorSpace], default=settings.color_space.value)
    p.add_argument("--log-level", default=settings.log_level)
    args = p.parse_args(argv)

    configure_logging(args.log_level)
    try:
        cfg = replace(
            settings.watermark_config(),
            alphabet_size=args.alphabet,
            color_space=ColorSpace(args.color_space),
        )
        watermarked = embed_watermark(args.host, args.watermark, args.key, args.step, cfg)
        save_rgb_uint8(args.out, watermarked)
    except (WatermarkError, OSError) as e:
        logger.error("embedding failed: %s", e)
        return 1

    print(f"Watermarked saved → {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
