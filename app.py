from fastapi import FastAPI
from contextlib import asynccontextmanager

# Import the conversion router
from dataconvert.router import router as conversion_router

# Import configuration and the conversion core
from dataconvert.config import ConverterConfig
from dataconvert.assist import create_assist_backend
from dataconvert.orchestrator import ConversionOrchestrator

# Import centralized HTTP client factory
from dataconvert.utils.http_client import (
    get_http_client_factory,
    ServiceType,
    lifespan_http_clients
)

# Import centralized logging configuration
from dataconvert.utils.logging_config import get_logger, setup_logging


# Set up logging
logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager: builds the orchestrator and its HTTP client."""
    config = ConverterConfig.from_env()

    client = None
    if config.assist is not None:
        factory = get_http_client_factory()
        client = factory.create_client(ServiceType.ASSIST, read_timeout=config.assist.timeout)

    app.state.orchestrator = ConversionOrchestrator(config, create_assist_backend(config, client=client))
    logger.info(f"Conversion service started (assist enabled: {config.assist_enabled})")

    # Use the centralized lifespan context manager for proper cleanup
    async with lifespan_http_clients():
        yield


app = FastAPI(title="dataconvert", lifespan=lifespan)

# Include the conversion router
app.include_router(conversion_router)


@app.get("/ping")
async def general_ping():
    return {"success": True, "data": "PONG!"}


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    uvicorn.run(app, host="0.0.0.0", port=8000)
