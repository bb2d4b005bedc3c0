"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.dependencies import get_config, get_orchestrator
from server.middleware import RequestIDMiddleware
from server.routes import health, metrics, search
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")

    config = get_config()
    for warning in config.validate():
        logger.warning(warning)

    orchestrator = get_orchestrator()
    logger.info(
        f"Search pipeline ready ({config.get_model_info()})",
        extra={
            "extra_fields": {
                "providers": [p.name for p in orchestrator.fanout.providers],
                "llm_provider": config.LLM_PROVIDER,
            }
        },
    )

    yield

    logger.info("FastAPI server shutting down")


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="SearchFusion API",
        description="Multi-provider web search with cited answer synthesis",
        version=get_config().APP_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(health.router)
    app.include_router(search.router)
    app.include_router(metrics.router)

    return app
