# rental_bookings/main.py

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rental_bookings.config import ALLOWED_ORIGINS, LISTING_DELETION_POLICY
from rental_bookings.logging_config import setup_logging
from rental_bookings.middleware import RequestIDMiddleware
from rental_bookings.realtime.publisher import publisher
from rental_bookings.routes.health import router as health_router
from rental_bookings.routes.listings import router as listings_router
from rental_bookings.routes.messages import router as messages_router
from rental_bookings.routes.metrics import router as metrics_router
from rental_bookings.routes.notifications import router as notifications_router
from rental_bookings.routes.reservations import router as reservations_router
from rental_bookings.routes.reviews import router as reviews_router
from rental_bookings.routes.wallets import router as wallets_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log effective runtime settings on startup."""
    logger.info(
        "FastAPI application starting up...",
        listing_deletion_policy=LISTING_DELETION_POLICY,
        realtime_enabled=publisher.enabled,
    )
    yield
    logger.info("FastAPI application shutting down")


app = FastAPI(
    title="Rental Bookings API",
    description="Reservations, cancellations with wallet refunds, and real-time notifications",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(reservations_router, tags=["Reservations"])
app.include_router(listings_router, tags=["Listings"])
app.include_router(wallets_router, tags=["Wallet"])
app.include_router(notifications_router, tags=["Notifications"])
app.include_router(messages_router, tags=["Messages"])
app.include_router(reviews_router, tags=["Reviews"])


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed bodies and params as ``{"success": false, ...}``."""
    logger.info("request_validation_failed", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": "Invalid request",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep the ``{"success": false, "error": ...}`` shape for HTTP errors too."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )

