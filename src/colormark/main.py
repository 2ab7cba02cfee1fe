from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from colormark import __version__
from colormark.core.config import configure_logging, settings
from colormark.api.routes.root import router as root_router
from colormark.api.routes.watermarking import router as watermarking_router

configure_logging()

app = FastAPI(title="Colormark API", version=__version__)

# CORS for local dev frontends
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "X-PSNR",
        "X-Params-Step",
        "X-Params-Alphabet",
        "X-Params-Color-Space",
    ],
)

app.include_router(root_router)
app.include_router(watermarking_router, prefix=settings.api_prefix)
