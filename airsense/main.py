"""FastAPI application setup for AirSense+."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router as api_router
from .config import settings

app = FastAPI(title="AirSense+")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root():
    """Liveness probe."""
    return {"status": "AirSense+ API running"}


# API routes
app.include_router(api_router, prefix="/v1")
