"""
FastAPI application for the carpool matching service.

Components (schedule repository, routing provider, match engine) are built in
the lifespan hook from Settings unless they were injected into create_app.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from carpool.api import geo_router, matching_router, register_exception_handlers
from carpool.config import Settings, settings
from carpool.services.estimator_provider import EstimatorRoutingProvider
from carpool.services.match_engine import MatchEngine
from carpool.services.provider_factory import create_routing_provider
from carpool.services.routing_provider import RoutingProvider
from carpool.services.schedule_repository import InMemoryScheduleRepository, ScheduleRepository

logger = logging.getLogger(__name__)


def build_repository(config: Settings) -> ScheduleRepository:
    if not config.USE_DATABASE:
        logger.info("[DB] USE_DATABASE=false, using in-memory schedule repository")
        return InMemoryScheduleRepository()

    from carpool.db import SqlScheduleRepository, create_session_factory, create_tables, init_engine

    engine = init_engine(config.DATABASE_URL, config.SQLALCHEMY_ECHO)
    create_tables(engine)
    return SqlScheduleRepository(create_session_factory(engine))


def create_app(
    match_engine: Optional[MatchEngine] = None,
    routing_provider: Optional[RoutingProvider] = None,
    repository: Optional[ScheduleRepository] = None,
    config: Optional[Settings] = None,
) -> FastAPI:
    config = config or settings

    if match_engine is not None:
        routing_provider = routing_provider or match_engine.routing_provider
    elif routing_provider is not None and repository is not None:
        match_engine = MatchEngine(repository, routing_provider, concurrency=config.MATCH_CONCURRENCY)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned_provider = None
        if app.state.match_engine is None:
            if app.state.routing_provider is None:
                owned_provider = create_routing_provider(config)
                app.state.routing_provider = owned_provider
            app.state.match_engine = MatchEngine(
                repository or build_repository(config),
                app.state.routing_provider,
                concurrency=config.MATCH_CONCURRENCY,
            )
        logger.info(f"[App] started with provider={app.state.routing_provider.name}")
        yield
        if owned_provider is not None:
            await owned_provider.aclose()

    app = FastAPI(title="Carpool Matching API", lifespan=lifespan)
    app.state.match_engine = match_engine
    app.state.routing_provider = routing_provider

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(matching_router)
    app.include_router(geo_router)

    @app.get("/health")
    async def health():
        provider = app.state.routing_provider
        return {
            "status": "ok",
            "provider": provider.name if provider is not None else None,
            "fallback": isinstance(provider, EstimatorRoutingProvider),
        }

    return app


app = create_app()
