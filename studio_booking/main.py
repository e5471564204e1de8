import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import config
from . import models  # noqa: F401 - registers tables with Base
from .database import Base, engine
from .domain.bookings.router import reminders_router
from .domain.bookings.router import router as bookings_router
from .domain.catalog.router import router as services_router
from .domain.clients.router import router as clients_router
from .domain.scheduling.router import router as availability_router
from .errors import BookingError
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
SLOW_REQUEST_MS = float(os.getenv("SLOW_REQUEST_MS", "1000"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"🚀 Studio Booking API starting ({config.ENVIRONMENT}, "
        f"default hours {config.WORKING_HOURS_START}-{config.WORKING_HOURS_END}, "
        f"reminders {config.REMINDER_DAYS_BEFORE} days before)"
    )
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
    except SQLAlchemyError as e:
        # Another API process may have created the tables first
        if "already exists" not in str(e):
            logger.error(f"❌ Failed to create database tables: {e}")
            raise
    logger.info(f"✅ Booking tables ready on {engine.dialect.name}")

    yield
    logger.info("Studio Booking API shutting down")


app = FastAPI(title="Studio Booking API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    """Render domain errors as {"kind", "message", "fields"?}"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.kind}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} - {exc.kind}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request-shape errors use the same body as domain validation errors"""
    errors = exc.errors()
    fields = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        if loc and ".".join(loc) not in fields:
            fields.append(".".join(loc))
    message = "; ".join(str(error.get("msg")) for error in errors) or "Invalid request"

    logger.warning(f"Validation error for {request.url.path}: {errors}")
    content = {"kind": "validation_error", "message": message}
    if fields:
        content["fields"] = fields
    return JSONResponse(status_code=422, content=content)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"❌ {request.method} {request.url.path} - Error: {str(e)}")
        raise

    elapsed_ms = (time.perf_counter() - started) * 1000
    if elapsed_ms > SLOW_REQUEST_MS:
        logger.warning(f"🐌 {request.method} {request.url.path} took {elapsed_ms:.0f}ms")
    return response


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {config.ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

# Routes
app.include_router(services_router)
app.include_router(availability_router)
app.include_router(bookings_router)
app.include_router(reminders_router)
app.include_router(clients_router)


@app.get("/")
def root():
    return {"message": "Studio Booking API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
