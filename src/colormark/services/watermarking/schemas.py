from dataclasses import dataclass
from enum import Enum

from colormark.core.errors import InvalidParameter


class ColorSpace(str, Enum):
    # carriers spread over the R, G and B planes
    RGB = "rgb"
    # carriers in the Y plane only, Cb/Cr untouched
    LUMA = "luma"


@dataclass
class WatermarkConfig:
    host_size: int = 512
    watermark_size: int = 128
    block_size: int = 8
    # Quantization levels per colour sample (2 = binarized watermark, 256 = raw bytes)
    alphabet_size: int = 2
    # Zig-zag index range [start, stop) the carrier coefficients are drawn from
    band: tuple[int, int] = (3, 28)
    # JPEG subsamples and coarsely quantizes chroma, so carriers default to Y
    color_space: ColorSpace = ColorSpace.LUMA
    # Threads used for the per-block DCT
    workers: int = 1

    def __post_init__(self) -> None:
        self.color_space = ColorSpace(self.color_space)
        self.band = (int(self.band[0]), int(self.band[1]))
        for name in ("host_size", "watermark_size", "block_size", "workers"):
            if getattr(self, name) <= 0:
                raise InvalidParameter(f"{name} must be positive, got {getattr(self, name)}")
        if not (2 <= self.alphabet_size <= 256):
            raise InvalidParameter(f"alphabet_size must be in [2, 256], got {self.alphabet_size}")
        start, stop = self.band
        last = self.block_size * self.block_size - 1
        # index 0 is DC, index `last` the highest-frequency corner
        if not (1 <= start < stop <= last):
            raise InvalidParameter(
                f"band must satisfy 1 <= start < stop <= {last}, got {self.band}"
            )

    @property
    def carrier_planes(self) -> int:
        return 1 if self.color_space == ColorSpace.LUMA else 3
