# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import LeadLensError
from .routes import admins, agents, auth, contacts, health, loan_officers, metadata
from .schemas.error import ErrorDetail, ErrorResponse
from .services.salesforce.client import close_crm_client, init_crm_client

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    init_crm_client(settings)
    yield
    await close_crm_client()


app = FastAPI(
    title="Lead Lens API",
    description="Role-scoped dashboard over Salesforce contacts",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

_HTTP_STATUS_CODES: dict[int, str] = {
    400: "VALIDATION",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "EXISTS",
}

_GENERIC_MESSAGE = "Internal server error"


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(LeadLensError)
async def lead_lens_exception_handler(request: Request, exc: LeadLensError):
    """Render service errors; upstream detail on 5xx is hidden in production."""
    message = exc.message
    if exc.status_code >= 500:
        request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
        logger.error("%s (request_id=%s): %s", type(exc).__name__, request_id, exc.message)
        if settings.is_production:
            message = _GENERIC_MESSAGE
    return _error_response(exc.status_code, exc.code, message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = _HTTP_STATUS_CODES.get(exc.status_code, "SERVER_ERROR" if exc.status_code >= 500 else "ERROR")
    return _error_response(exc.status_code, code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query strings are a 400, like any other validation failure."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _error_response(400, "VALIDATION", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    message = _GENERIC_MESSAGE if settings.is_production else str(exc) or _GENERIC_MESSAGE
    return _error_response(500, "SERVER_ERROR", message)


# Include routers
app.include_router(health.router, prefix="/api/health", tags=["health"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(contacts.router, prefix="/api/contacts", tags=["contacts"])
app.include_router(metadata.router, prefix="/api/metadata", tags=["metadata"])
app.include_router(admins.router, prefix="/api/admins", tags=["admins"])
app.include_router(loan_officers.router, prefix="/api/loan-officers", tags=["loan-officers"])
app.include_router(agents.router, prefix="/api/agents", tags=["agents"])
