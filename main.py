from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.api.v1.endpoints import resumes
from app.core.config import settings
from app.core.exceptions import ResumeServiceError, ValidationFailure, pydantic_errors_to_fields
from app.db.database import connect_to_mongo, close_mongo_connection
from app.tools.serializers import envelope
from contextlib import asynccontextmanager
import logging

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()
    yield
    await close_mongo_connection()

app = FastAPI(title="LifeMate Resume API", version="1.0.0", lifespan=lifespan)
app.include_router(resumes.router, prefix="/api/v1/resume", tags=["resume"])


@app.exception_handler(ResumeServiceError)
async def resume_error_handler(request: Request, exc: ResumeServiceError):
    errors = exc.errors if isinstance(exc, ValidationFailure) else None
    message = exc.message
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
        if settings.is_production:
            # class default message carries no internal detail
            message = type(exc)().message
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(message, success=False, errors=errors),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=envelope("Validation failed", success=False, errors=pydantic_errors_to_fields(exc.errors())),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=envelope(str(exc.detail), success=False))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = "Internal server error" if settings.is_production else f"Internal server error: {exc}"
    return JSONResponse(status_code=500, content=envelope(message, success=False))


@app.get("/health", tags=["health"])
async def health():
    """Health check endpoint returning service status."""
    return {"status": "ok"}
