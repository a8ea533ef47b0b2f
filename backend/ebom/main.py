"""
main.py — FastAPI Application Entrypoint

Purpose:
- Initialize application services (logging, config, DB session dependency).
- Register API routers.
- Define root-level health/status endpoints.
- Provide `app` object used by ASGI server (uvicorn).

This file should stay clean — no business logic here.
"""

import math
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ebom.api.v1 import lca, materials, reports, targets, treetables, workflow
from ebom.core import database
from ebom.core.config import settings
from ebom.core.logging import configure_logging, get_logger

# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------

configure_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # No migrations: create missing tables when a database is configured
    if database.engine is not None:
        database.init_db()
    else:
        logger.warning("SUPABASE_DB_URL not set; only /api/v1/lca endpoints are available")
    yield


app = FastAPI(
    lifespan=lifespan,
    title="EBOM LCA Backend",
    description="EBOM editing and lifecycle-carbon reporting backend",
    version="0.1.0",
)

# -----------------------------------------------------------------------------
# CORS
# -----------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Validation Errors
# -----------------------------------------------------------------------------

def _json_safe(value):
    """Replace NaN / inf anywhere in an error payload with their string form."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Same 422 body as FastAPI's default handler, except that rejected
    non-finite inputs are echoed back as "nan" / "inf" so the body stays valid JSON.
    """
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(_json_safe(exc.errors()))},
    )

# -----------------------------------------------------------------------------
# Router Registration
# -----------------------------------------------------------------------------

app.include_router(lca.router, prefix="/api/v1")
app.include_router(treetables.router, prefix="/api/v1")
app.include_router(materials.router, prefix="/api/v1")
app.include_router(targets.router, prefix="/api/v1")
app.include_router(reports.router, prefix="/api/v1")
app.include_router(workflow.router, prefix="/api/v1")

# -----------------------------------------------------------------------------
# Health Check
# -----------------------------------------------------------------------------

@app.get("/")
def root():
    return {"status": "ok", "message": "EBOM LCA backend running"}

# -----------------------------------------------------------------------------
# Main Entry Point
# -----------------------------------------------------------------------------

def run() -> None:
    """Console entry point: `ebom-api` (or `python -m ebom.main`)."""
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
