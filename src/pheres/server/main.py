"""
pheres API Server.

Hosts agents in memory and exposes them under /api/agents. Run with:

    uvicorn pheres.server.main:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from pheres.core.config import RuntimeConfig
from pheres.server.routes import agents

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def print_routes(app: FastAPI):
    print("\n" + "=" * 60)
    print("pheres API Routes")
    print("=" * 60)

    routes = sorted(
        (", ".join(sorted(route.methods - {"HEAD", "OPTIONS"})), route.path, route.name)
        for route in app.routes
        if isinstance(route, APIRoute)
    )
    for methods, path, name in sorted(routes, key=lambda r: (r[1], r[0])):
        print(f"  {methods:8} {path:40} → {name}")

    print("=" * 60 + "\n")


@asynccontextmanager
async def lifespan(app: FastAPI):
    print_routes(app)
    yield


def create_app(config: RuntimeConfig | None = None) -> FastAPI:
    config = config or RuntimeConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(title="pheres API", version=VERSION, lifespan=lifespan)

    if config.cors_origins:
        logger.info("CORS enabled for %s", ", ".join(config.cors_origins))
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(agents.router)

    @app.get("/")
    async def root():
        return {"name": "pheres API", "version": VERSION}

    return app


app = create_app()
