# src/colormark/core/config.py
import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from colormark.services.watermarking.schemas import ColorSpace, WatermarkConfig


class Settings(BaseSettings):
    # Load .env, accept extra keys without failing
    api_prefix: str = "/api"
    environment: str = "dev"
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    model_config = SettingsConfigDict(
        env_prefix="COLORMARK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",          # don't crash on unknown env vars
    )

    # --- Fixed geometry: must match between embed and extract ---
    host_size: int = Field(512, description="Host image side in pixels")
    watermark_size: int = Field(128, description="Watermark image side in pixels")
    block_size: int = Field(8, description="DCT block side in pixels")

    # --- Scheme parameters ---
    alphabet_size: int = Field(2, description="Quantization levels per colour sample")
    band_start: int = Field(3, description="First zig-zag index usable as carrier")
    band_stop: int = Field(28, description="One past the last zig-zag index usable as carrier")
    color_space: ColorSpace = ColorSpace.LUMA
    workers: int = Field(1, description="Threads for the per-block DCT")
    default_step_size: float = Field(50.0, description="Step size used when callers give none")

    def watermark_config(self) -> WatermarkConfig:
        return WatermarkConfig(
            host_size=self.host_size,
            watermark_size=self.watermark_size,
            block_size=self.block_size,
            alphabet_size=self.alphabet_size,
            band=(self.band_start, self.band_stop),
            color_space=self.color_space,
            workers=self.workers,
        )


def configure_logging(level: str | None = None) -> None:
    lvl = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


settings = Settings()
