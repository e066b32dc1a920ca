from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from powerbudget.config import settings
from powerbudget.router import router

log = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Buoy Power Budget", debug=settings.DEBUG)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix="/api")

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    log.info("Power budget API ready (CORS origins: %s).", ", ".join(settings.CORS_ORIGINS))
    return app
