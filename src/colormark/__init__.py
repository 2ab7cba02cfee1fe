from colormark.core.errors import (
    DecodeFailure,
    DimensionMismatch,
    InvalidBlockGrid,
    InvalidParameter,
    WatermarkError,
)
from colormark.services.watermarking.image_embed import embed_watermark
from colormark.services.watermarking.image_extract import extract_watermark
from colormark.services.watermarking.schemas import ColorSpace, WatermarkConfig

__version__ = "0.1.0"

__all__ = [
    "ColorSpace",
    "DecodeFailure",
    "DimensionMismatch",
    "InvalidBlockGrid",
    "InvalidParameter",
    "WatermarkConfig",
    "WatermarkError",
    "embed_watermark",
    "extract_watermark",
]
