"""
Content Lockdown Service

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lockdown.config import get_settings
from lockdown.database import init_db, close_db
from lockdown.api.v1 import router as api_v1_router
from lockdown.api.middleware.request_id import RequestIdMiddleware
from lockdown.engines.restrictions import ExtensionRegistry
from lockdown.kernel.content import ItemNotFound
from lockdown.kernel.permissions import CapabilityDenied
from lockdown.schemas.common import HealthResponse
from lockdown.logging_config import configure_logging, get_logger

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    Content Lockdown Service

    Lets administrators lock or protect selected content items.

    - **Locked** items cannot be edited, trashed or deleted by non-administrators
    - **Protected** items cannot be trashed or deleted; a published protected
      item stays published, keeps its password and cannot be rescheduled
      into the future by non-administrators
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Host integrations register their transforms here at import time
app.state.extensions = ExtensionRegistry()

# add_middleware stacks innermost-first; CORS goes last so it wraps everything
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_headers(request: Request) -> dict:
    req_id = getattr(request.state, "request_id", None)
    return {"X-Request-ID": req_id} if req_id else {}


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Attach the request ID to 4xx/5xx responses."""
    headers = {**(exc.headers or {}), **_error_headers(request)}
    content = {"detail": exc.detail}
    req_id = getattr(request.state, "request_id", None)
    if req_id and exc.status_code >= 500:
        content["request_id"] = req_id
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(CapabilityDenied)
async def capability_denied_handler(request: Request, exc: CapabilityDenied):
    """Refused capabilities, including lockdown restrictions, are 403s."""
    logger.info(
        "Capability denied",
        extra={
            "capability": exc.decision.capability,
            "item_id": exc.item_id,
            "restricted": exc.decision.restricted,
        },
    )
    content = {"detail": str(exc)}
    if exc.decision.restricted:
        content["code"] = f"item_{exc.decision.reason}"
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content=content,
        headers=_error_headers(request),
    )


@app.exception_handler(ItemNotFound)
async def item_not_found_handler(request: Request, exc: ItemNotFound):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "Item not found"},
        headers=_error_headers(request),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Handle request validation errors."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })
    content = {"detail": "Validation error", "errors": errors}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        content["request_id"] = req_id
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=content,
        headers=_error_headers(request),
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    req_id = getattr(request.state, "request_id", None)
    if settings.debug:
        content = {
            "detail": str(exc),
            "type": type(exc).__name__,
            "request_id": req_id,
        }
    else:
        content = {"detail": "Internal server error", "request_id": req_id}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=_error_headers(request),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(
        status="ok",
        version=settings.version,
        database="connected",
    )


app.include_router(
    api_v1_router,
    prefix=settings.api_v1_prefix,
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "lockdown.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
