# backend/app/main.py

import logging
import sys
from functools import lru_cache

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.assets import router as assets_router
from app.api.auth_routes import router as auth_router
from app.api.categories import router as categories_router
from app.api.departments import router as departments_router
from app.api.errors import setup_exception_handlers
from app.api.users import router as users_router
from app.api.warranties import router as warranties_router
from app.core.config import get_settings


@lru_cache(maxsize=1)
def configure_logging() -> None:
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    logging.getLogger("app").setLevel(log_level)

    # noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()

    app = FastAPI(title="AssetDesk API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["Authorization", "Content-Type"],
    )

    setup_exception_handlers(app)

    app.include_router(auth_router, prefix="/api", tags=["auth"])
    app.include_router(departments_router, prefix="/api", tags=["departments"])
    app.include_router(categories_router, prefix="/api", tags=["categories"])
    app.include_router(users_router, prefix="/api", tags=["users"])
    app.include_router(assets_router, prefix="/api", tags=["assets"])
    app.include_router(warranties_router, prefix="/api", tags=["warranties"])

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
