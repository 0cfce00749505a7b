from fastapi import FastAPI
from contextlib import asynccontextmanager
from typing import Optional
import logging
import os
import sys
import uvicorn

from podmanager.config_loader import load_config
from podmanager.connector import RedisNodeConnector
from podmanager.models.config import Settings
from podmanager.registry import registry_from_settings
from podmanager.routers import health_router, pods_router, sentinels_router
from podmanager.services.pod_service import PodManager
from podmanager.utils import setup_logging

logger = logging.getLogger(__name__)


def build_pod_manager(settings: Settings) -> PodManager:
    return PodManager(
        registry=registry_from_settings(settings),
        connector=RedisNodeConnector.from_settings(settings),
        settings=settings,
    )


def create_app(settings: Optional[Settings] = None, pod_manager: Optional[PodManager] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = settings or load_config(os.environ.get("PODMANAGER_CONFIG"))
        app.state.config = config
        app.state.pod_manager = pod_manager or build_pod_manager(config)
        logger.info("Pod manager API ready")
        yield

    app = FastAPI(title="Pod Manager API", lifespan=lifespan)
    app.include_router(health_router)
    app.include_router(pods_router)
    app.include_router(sentinels_router)
    return app


def serve(settings: Settings) -> None:
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    config_file = sys.argv[1] if len(sys.argv) > 1 else None
    serve(load_config(config_file))
