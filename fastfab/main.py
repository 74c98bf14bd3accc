import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

# Load environment variables as early as possible
load_dotenv()

from .config import settings
from .database import create_db_and_tables, engine, ensure_connection
from .dependencies import build_otp_service, get_dispatcher
from .application.ports.account_repo import CUSTOMER
from .exceptions import (
    AppError,
    DatabaseUnavailableError,
    app_error_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, SecurityMiddleware
from .routers import otp_router, products_router, session_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def purge_stale_otps() -> int:
    with Session(engine) as session:
        service = build_otp_service(CUSTOMER, session, settings, get_dispatcher())
        return service.purge_stale_otps(settings.OTP_RETENTION_HOURS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.db_init_ok = True
    app.state.db_init_error = None
    try:
        create_db_and_tables()
        logger.info("Database initialized successfully")
    except Exception as e:
        # Do not crash the app; report via health endpoint
        app.state.db_init_ok = False
        app.state.db_init_error = str(e)
        logger.exception("Database initialization failed")

    if app.state.db_init_ok:
        try:
            purge_stale_otps()
        except Exception:
            logger.exception("Stale OTP purge failed")

    if not settings.gupshup_configured:
        logger.warning("Gupshup credentials missing; OTPs will be logged instead of sent")
    if not settings.JWT_SECRET or not settings.JWT_REFRESH_SECRET:
        logger.warning("JWT secrets missing; OTP verification for existing accounts will fail")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")


# Initialize FastAPI
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url=("/docs" if settings.DOCS_ENABLED else None),
    redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
)

# Add custom exception handlers
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Add middleware
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityMiddleware)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(otp_router.router)
app.include_router(session_router.router)
app.include_router(products_router.router)


@app.get("/health")
def health_check():
    database = "ok"
    try:
        with Session(engine) as session:
            ensure_connection(session, max_attempts=1)
    except DatabaseUnavailableError:
        database = "unavailable"

    healthy = database == "ok" and getattr(app.state, "db_init_ok", True)
    return {
        "success": healthy,
        "status": "healthy" if healthy else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": database,
        "db_init_error": getattr(app.state, "db_init_error", None),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "fastfab.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=1,
        log_level=settings.LOG_LEVEL.lower(),
    )
