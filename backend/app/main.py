from contextlib import asynccontextmanager
import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import ai, cases, departments, health, osce, stats, users
from app.config import settings
from app.database import close_db, init_db
from app.logging import configure_logging, request_id_var
from app.services.ai import (
    CaseContentError,
    ModelClientConfigError,
    ProviderError,
    ResponseParseError,
    build_model_client,
    classify_error,
)

configure_logging()
logger = logging.getLogger("clerksmart")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting ClerkSmart API")
    try:
        await init_db()
        logger.info("Database initialized")
    except Exception:
        logger.exception("Failed to initialize database")
        raise

    try:
        app.state.model_client = build_model_client(settings)
        logger.info("Model client ready (%s)", app.state.model_client.model)
    except ModelClientConfigError:
        app.state.model_client = None
        logger.exception("Model client not configured; AI endpoints will return 503")

    yield

    logger.info("Shutting down ClerkSmart API")
    client = getattr(app.state, "model_client", None)
    if client is not None:
        await client.aclose()
    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception:
        logger.exception("Error closing database")
    logger.info("ClerkSmart API shutdown complete")


async def http_exception_handler(_request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    logger.info("Rejected malformed request: %s", exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request format"})


async def case_content_exception_handler(_request: Request, exc: CaseContentError):
    logger.warning("Practice case rejected: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def model_config_exception_handler(_request: Request, exc: ModelClientConfigError):
    logger.error("Model client misconfigured: %s", exc)
    return JSONResponse(status_code=503, content={"error": str(exc)})


async def classified_exception_handler(_request: Request, exc: Exception):
    classified = classify_error(exc)
    logger.error("Request failed (%s): %s", classified.kind, exc)
    return JSONResponse(status_code=classified.status_code, content=classified.to_body())


async def unhandled_exception_handler(_request: Request, exc: Exception):
    logger.exception("Unhandled error")
    classified = classify_error(exc)
    return JSONResponse(status_code=classified.status_code, content=classified.to_body())


def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure to a ``{"error": ...}`` body."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(CaseContentError, case_content_exception_handler)
    app.add_exception_handler(ModelClientConfigError, model_config_exception_handler)
    app.add_exception_handler(ProviderError, classified_exception_handler)
    app.add_exception_handler(ResponseParseError, classified_exception_handler)
    app.add_exception_handler(SQLAlchemyError, classified_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def include_routers(app: FastAPI) -> None:
    app.include_router(health.router)
    app.include_router(ai.router, prefix=settings.api_prefix)
    app.include_router(users.router, prefix=settings.api_prefix)
    app.include_router(departments.router, prefix=settings.api_prefix)
    app.include_router(cases.router, prefix=settings.api_prefix)
    app.include_router(osce.router, prefix=settings.api_prefix)
    app.include_router(stats.router, prefix=settings.api_prefix)


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    # ClerkSmart API

    Simulated clinical clerking for medical students.

    ## Features

    - **Case Generation** - Department-specific and practice cases
    - **Patient Simulation** - Adult and pediatric history taking
    - **Results** - Examination and investigation findings on request
    - **Feedback** - Scored evaluation and a completed case report
    - **OSCE** - Timed stations with follow-up questions and scoring
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id", str(uuid.uuid4()))
    request_id_var.set(request_id)
    response = await call_next(request)
    response.headers.setdefault("X-Request-Id", request_id)
    return response


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    if not settings.debug:
        response.headers.setdefault(
            "Strict-Transport-Security",
            "max-age=63072000; includeSubDomains; preload",
        )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

include_routers(app)
register_exception_handlers(app)
