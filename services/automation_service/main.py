# main.py - FastAPI app entry point for the automation_service
# This file initializes and runs the FastAPI application for marketing automation.

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from services.automation_service.config import settings
from services.automation_service.routes import automations, executions, events, templates
from services.automation_service.routes.dependencies import automation_exception_handler
from services.automation_service.automation_registry import AutomationRegistry
from services.automation_service.automation_engine import AutomationEngine
from services.automation_service.action_dispatcher import ActionDispatcher
from services.automation_service.capabilities import Capabilities
from services.automation_service.event_publisher import AnalyticsEventPublisher
from services.automation_service.exceptions import AutomationError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    # An engine placed on app.state beforehand (tests, embedding) is used as is
    if hasattr(app.state, "automation_engine"):
        yield
        return

    # Startup
    logger.info(f"Starting {settings.service_name} on port {settings.service_port}")

    registry = AutomationRegistry()
    try:
        registry.redis_client.ping()
        logger.info("Redis connection established")
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {str(e)}")
        raise

    capabilities = Capabilities()
    publisher = AnalyticsEventPublisher()
    app.state.registry = registry
    app.state.automation_engine = AutomationEngine(
        workflow_store=registry,
        execution_store=registry,
        dispatcher=ActionDispatcher(capabilities),
        publisher=publisher
    )

    yield

    # Shutdown
    logger.info("Shutting down automation service...")
    await capabilities.close()
    await publisher.close()
    registry.redis_client.close()
    logger.info("Automation service shutdown complete")

# Create FastAPI app
app = FastAPI(
    title="Marketing Automation Service",
    description="Trigger/condition/action automation workflows for marketing sites",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AutomationError, automation_exception_handler)

# Include routers
app.include_router(automations.router)
app.include_router(executions.router)
app.include_router(events.router)
app.include_router(templates.router)

@app.get("/")
async def root():
    """Root endpoint with service info."""
    return {
        "service": settings.service_name,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "health": "/health"
    }

@app.get("/health")
async def health_check():
    """Basic health check endpoint."""
    registry = getattr(app.state, "registry", None)
    try:
        if registry is None:
            raise RuntimeError("registry not initialized")
        registry.redis_client.ping()
        redis_status = "healthy"
    except Exception:
        redis_status = "unhealthy"

    return {
        "status": "healthy" if redis_status == "healthy" else "degraded",
        "service": settings.service_name,
        "components": {
            "redis": redis_status
        }
    }

if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.service_port,
        reload=False,
        log_level=settings.log_level.lower()
    )
