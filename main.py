from contextlib import asynccontextmanager

from fastapi import FastAPI

from ampmap.logger import UnifiedLogger
from ampmap.runtime.config import RuntimeConfig
from ampmap.runtime.bootstrap import bootstrap_runtime
from ampmap_api.endpoints import router as api_router, register_exception_handlers

# Create main logger
logger = UnifiedLogger(tag="main")


# Run in development
# uvicorn main:app --host 127.0.0.1 --port 8317 --reload


#######################################################################
## FastAPI lifespan with runtime bootstrap
#######################################################################

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    config = RuntimeConfig.from_environment()

    # Load, migrate and register the mapping table
    runtime = await bootstrap_runtime(config)

    # Store runtime context in app state for API access
    app.state.runtime = runtime

    logger.info("Application startup complete", system_root=str(config.system_root))

    yield  # App runs here

    # Shutdown
    if getattr(app.state, "runtime", None):
        await app.state.runtime.shutdown()
        app.state.runtime = None  # Clear app state to match global context
        logger.info("Application shutdown complete")


#######################################################################
## FastAPI application setup
#######################################################################

app = FastAPI(lifespan=lifespan, title="ampmap")

# Register API routes
app.include_router(api_router)

# Register API exception handlers
register_exception_handlers(app)

# Set up unified logging with instrumentation
logger.setup_instrumentation(app)
