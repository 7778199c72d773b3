import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.routers import api_keys, catalog, preferences
from src.config import configure_logging, settings
from src.models import init_db
from src.services.errors import InputValidationError, MissingCredentialError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    configure_logging()
    init_db()
    logger.info(f"{settings.app_name} API ready on port {settings.api_port}")
    yield


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InputValidationError)
    async def input_validation_handler(request: Request, exc: InputValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(MissingCredentialError)
    async def missing_credential_handler(request: Request, exc: MissingCredentialError) -> JSONResponse:
        logger.warning(f"Request rejected, credentials missing: {exc}")
        return JSONResponse(
            status_code=428,
            content={"detail": str(exc), "error": "missing_credentials"},
        )


def include_routers(app: FastAPI) -> None:
    app.include_router(catalog.router, prefix="/api/v1/catalog", tags=["catalog"])
    app.include_router(preferences.router, prefix="/api/v1/preferences", tags=["preferences"])
    app.include_router(api_keys.router, prefix="/api/v1", tags=["api-keys"])


app = FastAPI(
    title=settings.app_name,
    description="Extract normalized supplier catalogs from websites and PDF brochures",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
include_routers(app)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}
