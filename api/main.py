"""
Orderflow - Main FastAPI Application.

REST API over the order fulfillment core: order intake, the status
state machine, kitchen and dispatch views, payment batches and reports.
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import time

from api.routes import couriers, health, orders, payments, reports, stores
from core.domain.exceptions import (
    InvalidPaymentTransition,
    InvalidTransition,
    OrderNotFound,
    StaleState,
    UnknownStore,
)
from core.infrastructure.database.config import close_database, init_database


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# =============================================================================
# CREATE FASTAPI APP
# =============================================================================

app = FastAPI(
    title="Orderflow - Order Fulfillment API",
    description="""
    Order fulfillment core for a delivery storefront.

    Features:
    - Role-gated order state machine with lost-update protection
    - SLA deadlines and overdue detection
    - Kitchen workload, preparation queue and dispatch board
    - Payment settlement, refunds, reconciliation and invoices
    - Revenue forecast and payment analytics
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)


# =============================================================================
# REQUEST LOGGING MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing."""
    start_time = time.time()
    logger.info(f"→ {request.method} {request.url.path}")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"← {request.method} {request.url.path} "
        f"[{response.status_code}] ({duration:.3f}s)"
    )
    return response


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    logger.info(f"Rejected transition on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "InvalidTransition",
            "edge": exc.edge,
            "detail": exc.reason,
        },
    )


@app.exception_handler(StaleState)
async def stale_state_handler(request: Request, exc: StaleState):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "error": "StaleState",
            "detail": str(exc),
            "expected": exc.expected,
            "actual": exc.actual,
        },
    )


@app.exception_handler(InvalidPaymentTransition)
async def invalid_payment_transition_handler(request: Request, exc: InvalidPaymentTransition):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "InvalidPaymentTransition", "detail": str(exc)},
    )


@app.exception_handler(OrderNotFound)
@app.exception_handler(UnknownStore)
async def not_found_handler(request: Request, exc: Exception):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "ValidationError", "detail": str(exc)},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# =============================================================================
# STARTUP/SHUTDOWN EVENTS
# =============================================================================

@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info("🚀 Orderflow API starting up...")
    await init_database()
    logger.info("📚 Swagger UI available at: /docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    await close_database()
    logger.info("👋 Orderflow API shutting down...")


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

app.include_router(health.router, tags=["Health"])
app.include_router(orders.router, prefix="/api/v1/orders", tags=["Orders"])
app.include_router(stores.router, prefix="/api/v1/stores", tags=["Stores"])
app.include_router(payments.router, prefix="/api/v1/stores", tags=["Payments"])
app.include_router(reports.router, prefix="/api/v1/stores", tags=["Reports"])
app.include_router(couriers.router, prefix="/api/v1/couriers", tags=["Couriers"])


@app.get("/", tags=["Root"])
async def root():
    """API root endpoint."""
    return {
        "message": "Orderflow - Order Fulfillment API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
