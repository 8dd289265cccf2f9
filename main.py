from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

# Core
from core.config import settings
from core.config_validator import validate_config_on_startup
from core.errors import AppError, ValidationError
from core.logging_config import logger
from core.responses import error_response, validation_message
from database import create_db_and_tables

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.auth import router as auth_router
from routers.users import router as users_router
from routers.roles import router as roles_router
from routers.permissions import router as permissions_router
from routers.health import router as health_router


def _field_errors(exc: RequestValidationError):
    """Flatten pydantic errors into ``[{field, message}]``."""
    problems = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        problems.append({"field": ".".join(loc) or None, "message": err.get("msg", "Invalid value")})
    return problems


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app(init_db: bool = True) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Role-based access control administration API",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENV})")
        validate_config_on_startup()
        if init_db:
            create_db_and_tables()
        for route in app.routes:
            path = getattr(route, "path", None)
            if path is None:
                continue
            methods = ",".join(sorted(getattr(route, "methods", None) or []))
            logger.debug(f"Route {methods:10s} {path}")

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code in (401, 403):
            logger.warning(f"HTTP {exc.status_code} at {request.url.path}: {exc.message}")

        errors = exc.errors if isinstance(exc, ValidationError) and exc.errors else None
        message = validation_message(errors, exc.message) if errors else exc.message
        return error_response(message, exc.status_code, error=exc.message, errors=errors)

    @app.exception_handler(RequestValidationError)
    async def handle_validation(request: Request, exc: RequestValidationError):
        errors = _field_errors(exc)
        return error_response(validation_message(errors), 400, error="Validation failed", errors=errors)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 429):
            logger.warning(f"HTTP {exc.status_code} at {request.url.path}: {exc.detail}")
        return error_response(
            str(exc.detail),
            exc.status_code,
            error=exc.detail,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return error_response("Internal server error", 500, error=str(exc))

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(roles_router)
    app.include_router(permissions_router)

    return app


# Create the global FastAPI instance
app = create_app()
