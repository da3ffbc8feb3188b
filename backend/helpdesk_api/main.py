"""
Main application entry point for the helpdesk backend.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import HelpdeskAPIError, MethodNotAllowed, StorageError, ValidationInputError
from .core.lifespan import lifespan
from .api.schemas.common import ErrorResponse

from .api.routers import extension
from .api.routers import push

logger = logging.getLogger(__name__)


# Create the main app instance
app = FastAPI(
    title="Helpdesk API",
    description="Helpdesk backend - extension tokens and web push subscriptions",
    version="1.0.0",
    lifespan=lifespan
)

# CORS Configuration - Allow all origins for the browser extension
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(HelpdeskAPIError)
async def helpdesk_error_handler(request: Request, exc: HelpdeskAPIError):
    if isinstance(exc, StorageError):
        # Driver details stay in the logs
        logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc.message)
        return _envelope(exc.status_code, "Server error")
    return _envelope(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return _envelope(ValidationInputError.status_code, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == MethodNotAllowed.status_code:
        return _envelope(exc.status_code, MethodNotAllowed.default_message)
    return _envelope(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _envelope(500, "Server error")


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"ok": True}


# Include routers
app.include_router(extension.router, prefix="/api")
app.include_router(push.router, prefix="/api")
