from fastapi import APIRouter

from ...core.config import settings


router = APIRouter()


@router.get("/", tags=["root"])
def read_root() -> dict[str, str]:
    return {"message": "Welcome to Colormark API"}


@router.get("/health", tags=["root"])
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/healthz", tags=["root"])
def healthz() -> dict[str, str]:
    return {"status": "ok", "env": settings.environment}
