from typing import Optional

from fastapi import APIRouter, UploadFile, File, Form, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from ...core.config import settings
from ...core.errors import WatermarkError
from ...services.watermarking.helpers import (
    encode_png,
    ensure_square,
    load_rgb_uint8,
    mean_absolute_error,
    psnr,
    sample_accuracy,
)
from ...services.watermarking.image_embed import embed_watermark
from ...services.watermarking.image_extract import extract_watermark
from ...services.watermarking.qim import representable_levels

router = APIRouter(prefix="/watermark", tags=["watermark"])


class VerifyResponse(BaseModel):
    mean_absolute_error: float
    sample_accuracy: float
    psnr: float
    key: int
    step_size: float


def _step(step_size: Optional[float]) -> float:
    return float(step_size if step_size is not None else settings.default_step_size)


@router.get("/config")
def get_config():
    cfg = settings.watermark_config()
    return {
        "host_size": cfg.host_size,
        "watermark_size": cfg.watermark_size,
        "block_size": cfg.block_size,
        "alphabet_size": cfg.alphabet_size,
        "band": list(cfg.band),
        "color_space": cfg.color_space.value,
        "default_step_size": settings.default_step_size,
    }


@router.post("/embed")
async def embed_image(
    host: UploadFile = File(...),
    watermark: UploadFile = File(...),
    key: int = Form(...),
    step_size: Optional[float] = Form(None),
):
    cfg = settings.watermark_config()
    step = _step(step_size)
    try:
        host_rgb = load_rgb_uint8(await host.read())
        out = embed_watermark(host_rgb, await watermark.read(), key, step, cfg)
    except WatermarkError as e:
        raise HTTPException(status_code=400, detail=f"Watermark failed: {e}")

    headers = {
        "X-PSNR": f"{psnr(host_rgb, out):.3f}",
        "X-Params-Step": str(step),
        "X-Params-Alphabet": str(cfg.alphabet_size),
        "X-Params-Color-Space": cfg.color_space.value,
    }
    return Response(content=encode_png(out), media_type="image/png", headers=headers)


@router.post("/extract")
async def extract_image(
    file: UploadFile = File(...),
    key: int = Form(...),
    step_size: Optional[float] = Form(None),
):
    cfg = settings.watermark_config()
    step = _step(step_size)
    try:
        recovered = extract_watermark(await file.read(), key, step, cfg)
    except WatermarkError as e:
        raise HTTPException(status_code=400, detail=f"Extraction failed: {e}")

    headers = {
        "X-Params-Step": str(step),
        "X-Params-Alphabet": str(cfg.alphabet_size),
    }
    return Response(content=encode_png(recovered), media_type="image/png", headers=headers)


@router.post("/verify", response_model=VerifyResponse)
async def verify_image(
    file: UploadFile = File(...),
    reference: UploadFile = File(...),
    key: int = Form(...),
    step_size: Optional[float] = Form(None),
):
    cfg = settings.watermark_config()
    step = _step(step_size)
    try:
        reference_rgb = load_rgb_uint8(await reference.read())
        ensure_square(reference_rgb, cfg.watermark_size, "Reference watermark")
        # recovered samples only take the alphabet levels
        expected = representable_levels(reference_rgb, cfg.alphabet_size)
        recovered = extract_watermark(await file.read(), key, step, cfg)
    except WatermarkError as e:
        raise HTTPException(status_code=400, detail=f"Verification failed: {e}")

    return VerifyResponse(
        mean_absolute_error=mean_absolute_error(recovered, expected),
        sample_accuracy=sample_accuracy(recovered, expected),
        psnr=psnr(recovered, expected),
        key=key,
        step_size=step,
    )
