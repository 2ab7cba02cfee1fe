import argparse
import logging
import sys
from dataclasses import replace

from colormark.core.config import configure_logging, settings
from colormark.core.errors import WatermarkError
from colormark.services.watermarking.helpers import (
    load_rgb_uint8, save_rgb_uint8, ensure_square, mean_absolute_error, sample_accuracy
)
from colormark.services.watermarking.image_extract import extract_watermark
from colormark.services.watermarking.qim import representable_levels
from colormark.services.watermarking.schemas import ColorSpace

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Recover a colour watermark from a watermarked image")
    p.add_argument("--in", dest="inp", required=True, help="Input image (possibly recompressed)")
    p.add_argument("--out", dest="out", required=True, help="Where to save the recovered watermark")
    p.add_argument("--key", type=int, required=True, help="Key used at embedding time")
    p.add_argument("--step", type=float, default=settings.default_step_size)
    p.add_argument("--alphabet", type=int, default=settings.alphabet_size)
    p.add_argument("--color-space", choices=[c.value for c in ColorSpace], default=settings.color_space.value)
    p.add_argument("--reference", default=None, help="If provided, compares the result against this watermark")
    p.add_argument("--log-level", default=settings.log_level)
    args = p.parse_args(argv)

    configure_logging(args.log_level)
    try:
        cfg = replace(
            settings.watermark_config(),
            alphabet_size=args.alphabet,
            color_space=ColorSpace(args.color_space),
        )
        recovered = extract_watermark(args.inp, args.key, args.step, cfg)
        save_rgb_uint8(args.out, recovered)
        print(f"Recovered watermark saved → {args.out}")

        if args.reference:
            reference = load_rgb_uint8(args.reference)
            ensure_square(reference, cfg.watermark_size, "Reference watermark")
            reference = representable_levels(reference, cfg.alphabet_size)
            mae = mean_absolute_error(recovered, reference)
            acc = sample_accuracy(recovered, reference)
            print(f"MAE vs reference: {mae:.2f}, identical samples: {acc*100:.2f}%")
        else:
            print("No reference provided; raw watermark recovered.")
    except (WatermarkError, OSError) as e:
        logger.error("extraction failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
