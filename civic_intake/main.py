import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from civic_intake.core.config import settings
from civic_intake.core.database import Database
from civic_intake.core.errors import InternalError
from civic_intake.core.logging import configure_logging
from civic_intake.api.routes import auth, complaints

logger = logging.getLogger(__name__)

MISSING_ERROR_TYPES = {"missing", "string_too_short"}


def describe_validation_error(exc: RequestValidationError) -> str:
    """Short, caller-safe message for a request that failed validation"""
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        return "Malformed JSON body"
    if any(error.get("type") in MISSING_ERROR_TYPES for error in errors):
        return "Missing required fields"
    # Last element of loc is the offending field (body/query prefix dropped)
    fields = sorted({str(error["loc"][-1]) for error in errors if error.get("loc")})
    if fields:
        return f"Invalid value for: {', '.join(fields)}"
    return "Invalid request"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Bad input is always the caller's problem: 400, never 422 or 500
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": describe_validation_error(exc)},
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=InternalError.status_code,
        content={"detail": InternalError.default_detail},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=InternalError.status_code,
        content={"detail": InternalError.default_detail},
    )


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Pass a Database to reuse an existing handle (tests); otherwise one is
    built from settings when the app starts.
    """
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage app lifecycle events.

        Startup: open the database pool, optionally create tables
        Shutdown: close the pool
        """
        db = database if database is not None else Database.from_settings(settings)
        if settings.AUTO_CREATE_TABLES:
            # In production, the schema is managed by migrations instead
            db.create_all()
        app.state.database = db
        logger.info(f"Civic Intake API started ({settings.ENVIRONMENT})")
        yield
        db.close()

    app = FastAPI(
        title="Civic Intake API",
        description="Citizen complaint intake",
        version="1.0.0",
        lifespan=lifespan
    )

    # CORS middleware - allows the frontend to call the API with cookies
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,  # Session cookie must be sent cross-origin
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(auth.router)
    app.include_router(complaints.router)

    @app.get("/")
    async def root():
        """Root endpoint - API information"""
        return {"message": "Civic Intake API", "version": "1.0.0"}

    @app.get("/health")
    async def health(request: Request):
        """Health check endpoint - verifies the database answers"""
        try:
            request.app.state.database.execute("SELECT 1 AS ok")
        except SQLAlchemyError as exc:
            logger.warning(f"Health check failed: {exc}")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy"},
            )
        return {"status": "healthy"}

    return app


app = create_app()
