from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from src.app.config import settings
from src.app.exceptions import register_exception_handlers
from src.app.logging_config import setup_logging
from src.app.middleware import register_middleware
from src.api import gateway
from src.api.v1.router import SERVICE_ROUTERS, build_service_router

logger = logging.getLogger(__name__)

BACKEND_SERVICES = tuple(SERVICE_ROUTERS)
SERVICES = BACKEND_SERVICES + ("gateway", "all")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME} ({app.state.service})...")
    yield
    # Shutdown
    proxy = getattr(app.state, "gateway_proxy", None)
    if proxy is not None:
        await proxy.aclose()
    logger.info("Shutting down...")


def create_application(service: Optional[str] = None) -> FastAPI:
    """
    Build the FastAPI app for one service.

    ``gateway`` serves the proxy under /api; ``all`` mounts every backend
    service in one process; any other name mounts just that service.
    """
    service = (service or settings.SERVICE_NAME).lower()
    if service not in SERVICES:
        raise ValueError(f"Unknown service {service!r}; expected one of {', '.join(SERVICES)}")

    setup_logging()

    application = FastAPI(
        title=f"{settings.APP_NAME} - {service}",
        debug=settings.DEBUG,
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.service = service

    # Middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(GZipMiddleware, minimum_size=1000)
    register_middleware(application)
    register_exception_handlers(application)

    @application.get("/health", tags=["health"])
    async def health_check():
        return {"status": "healthy", "service": service, "environment": settings.ENVIRONMENT}

    # Routers
    if service == "gateway":
        application.include_router(gateway.router, prefix="/api")
    elif service == "all":
        application.include_router(build_service_router(*BACKEND_SERVICES))
    else:
        application.include_router(build_service_router(service))

    return application


app = create_application()
