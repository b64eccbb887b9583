import os
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse
import traceback
import uvicorn

from routers import auth, bugs, admin
from database import init_async_db, close_async_db
from config import settings, setup_logging
from exceptions import AppError, DuplicateError, ServerError
from middleware import LoggingMiddleware
from utils.api_response import error_response, success_response

# Setup logging first
logger, request_id_filter = setup_logging()

logger.info(f"Database target: {settings.DB_NAME} @ {settings.DB_HOST}")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.SETTING_VERSION,
    swagger_ui_parameters={
        "persistAuthorization": True,
        "displayRequestDuration": True,
        "tryItOutEnabled": True,
        "defaultModelsExpandDepth": -1,
    }
)

# Add logging middleware
app.add_middleware(LoggingMiddleware, request_id_filter=request_id_filter)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
    expose_headers=settings.CORS_EXPOSE_HEADERS,
)

# Include routers
logger.info("Including routers...")

# Auth router with custom prefix
app.include_router(
    auth.router,
    prefix="/api/auth",
    tags=["auth"],
    responses={401: {"description": "Not authenticated"}}
)

app.include_router(bugs.router)
app.include_router(admin.router)

logger.info("Routers included")


@app.on_event("startup")
async def startup_event():
    logger.info("Application starting up...")
    await init_async_db()
    logger.info("Database initialized")


@app.on_event("shutdown")
async def shutdown_event():
    await close_async_db()


@app.get("/health")
async def health():
    """Liveness check"""
    return success_response(message="Server is running")


@app.get("/api/health")
async def health_check():
    """Health check endpoint for monitoring"""
    body = success_response(message="Server is running")
    body["version"] = settings.SETTING_VERSION
    return body


def _field_name(loc) -> str:
    # ("body", "email") -> "email"; ("query", "limit") -> "limit"
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header", "cookie")]
    return ".".join(parts) or "body"


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{exc.name} in {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.name} in {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, errors=getattr(exc, "details", None), error=exc.name),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors (body parsing, query params, etc.)"""
    logger.info(f"RequestValidationError in {request.url.path}:")
    errors = []
    for error in exc.errors():
        logger.info(f"  - {error.get('loc')}: {error.get('msg')} (type: {error.get('type')})")
        errors.append({"field": _field_name(error.get("loc", ())), "message": error.get("msg")})
    return JSONResponse(
        status_code=400,
        content=error_response("Validation failed", errors=errors, error="ValidationError"),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = f"Route {request.url.path} not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message),
        headers=getattr(exc, "headers", None),
    )


# MySQL ER_DUP_ENTRY
MYSQL_DUPLICATE_ENTRY = 1062


def is_unique_violation(exc: IntegrityError) -> bool:
    """True for unique-index violations only; NOT NULL and FK failures are not duplicates."""
    orig = exc.orig
    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True
    return "unique constraint" in str(orig).lower()


def _server_error_response(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception in {request.url.path}: {type(exc).__name__}: {exc}", exc_info=exc)
    error = ServerError()
    content = error_response(error.message, error=error.name)
    if not settings.IS_PRODUCTION:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=error.status_code, content=content)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    if not is_unique_violation(exc):
        return _server_error_response(request, exc)
    logger.warning(f"IntegrityError in {request.url.path}: {exc.orig}")
    error = DuplicateError()
    return JSONResponse(
        status_code=error.status_code,
        content=error_response(error.message, error=error.name),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for any unhandled exceptions"""
    return _server_error_response(request, exc)


logger.info("Application startup complete")


# ==================== CLI Entry Point ====================

def main():
    """Run the API as a standalone process"""
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "5000")),
        reload=False,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
