from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .database import build_engine, build_sessionmaker, init_db
from .errors import register_exception_handlers
from .logging_config import configure_logging
from .routes import transactions, users

logger = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = build_engine(settings)
        init_db(engine)
        app.state.engine = engine
        app.state.session_factory = build_sessionmaker(engine)
        logger.info("startup", database=engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            engine.dispose()
            logger.info("shutdown")

    app = FastAPI(title="Finance Tracker API", lifespan=lifespan)
    app.state.settings = settings

    # registered first so CORS stays the outer middleware
    register_exception_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def home():
        return {"message": "Finance Tracker API running"}

    app.include_router(users.router)
    app.include_router(transactions.router)
    return app


def run() -> None:
    uvicorn.run("finance_tracker.main:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
