from fastapi import FastAPI
from fastapi.exceptions import HTTPException as FastAPIHTTPException

from rxdesk.core.logger import setup_logging
from rxdesk.middleware.cors import configure_cors
from rxdesk.middleware.logging import RequestLoggerMiddleware
from rxdesk.middleware import error_handler

# Routers
from rxdesk.routers import doctors as doctors_router
from rxdesk.routers import patients as patients_router
from rxdesk.routers import pharmacies as pharmacies_router
from rxdesk.routers import prescriptions as prescriptions_router
from rxdesk.routers import otp as otp_router
from rxdesk.routers import health as health_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    setup_logging()
    description = (
        "RxDesk Backend API.\n\n"
        "Prescription issue and dispense tracking for doctors and pharmacies, "
        "plus one-time phone verification codes."
    )

    openapi_tags = [
        {"name": "doctors", "description": "Doctor directory and prescribing history."},
        {"name": "patients", "description": "Patient directory and prescriptions."},
        {"name": "pharmacies", "description": "Pharmacy directory and dispense history."},
        {"name": "prescriptions", "description": "Issue, look up and dispense prescriptions."},
        {"name": "otp", "description": "Generate and verify one-time codes."},
        {"name": "health", "description": "Health checks and service status endpoints."},
    ]

    app = FastAPI(
        title="RxDesk Prescription API",
        version="0.1.0",
        description=description,
        openapi_tags=openapi_tags,
    )

    # Middleware
    configure_cors(app)
    app.add_middleware(RequestLoggerMiddleware)

    # Exception handlers
    app.add_exception_handler(FastAPIHTTPException, error_handler.http_exception_handler)

    # Include routers
    app.include_router(health_router.router)
    app.include_router(doctors_router.router)
    app.include_router(patients_router.router)
    app.include_router(pharmacies_router.router)
    app.include_router(prescriptions_router.router)
    app.include_router(otp_router.router)

    return app


app = create_app()
