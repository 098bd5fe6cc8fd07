from fastapi import FastAPI
from contextlib import asynccontextmanager
from app.routers import gateway_router, health_router
from app.services.tenant_registry import load_tenant_registry
from app.utils.exceptions import ConfigurationError
from app.utils.http_client import create_http_client
from app.utils.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events for the application"""
    # Startup logic
    app.state.tenant_registry = None
    app.state.config_error = None
    try:
        logger.info("Loading tenant configuration...")
        app.state.tenant_registry = load_tenant_registry()
    except ConfigurationError as e:
        # Every gateway request answers 500 until the configuration is fixed
        app.state.config_error = e
        logger.critical(f"Failed to load tenant configuration: {e.message}")

    app.state.http_client = create_http_client()
    logger.info("Media gateway started")

    yield  # Run application

    # Shutdown logic
    try:
        logger.info("Shutting down media gateway...")
        await app.state.http_client.aclose()
        logger.info("Media gateway shut down successfully")
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}")

app = FastAPI(title="Media Signing Gateway", lifespan=lifespan)

app.include_router(health_router.router, prefix="/health", tags=["Health"])
# Catch-all, must be registered last
app.include_router(gateway_router.router)
