import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orderboard.core.config import CORS_ORIGINS, DATABASE_URL, ENV
from orderboard.core.database import Base, engine
from orderboard.core.errors import register_exception_handlers
from orderboard.core.logging_setup import configure_logging
from orderboard.core.startup_checks import (
    apply_migrations,
    ensure_migrations_applied,
    validate_database_environment,
)
from orderboard.middleware.observability import ObservabilityMiddleware
import orderboard.models  # registra los models antes del create_all

from orderboard.routers.customers import router as customers_router
from orderboard.routers.dashboard import router as dashboard_router
from orderboard.routers.internal_metrics import router as internal_metrics_router
from orderboard.routers.orders import router as orders_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini")))


def _startup_tasks() -> None:
    try:
        logger.info("%s env=%s", STARTUP_PREFIX, ENV)
        validate_database_environment()
        if DATABASE_URL.startswith("sqlite"):
            Base.metadata.create_all(bind=engine)
        apply_migrations(alembic_config_path=ALEMBIC_CONFIG_PATH)
        ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


def _shutdown_tasks() -> None:
    engine.dispose()
    logger.info("%s engine disposed", STARTUP_PREFIX)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield
    _shutdown_tasks()


app = FastAPI(
    title="Order Board API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)
register_exception_handlers(app)

# Routers
app.include_router(orders_router)
app.include_router(customers_router)
app.include_router(dashboard_router)
app.include_router(internal_metrics_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
