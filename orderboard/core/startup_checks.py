from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from sqlalchemy.engine import Engine

from orderboard.core.config import AUTO_APPLY_MIGRATIONS, DATABASE_URL, ENV_NORMALIZED, IS_PROD

logger = logging.getLogger(__name__)
MIGRATIONS_PREFIX = "[MIGRATIONS]"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def validate_database_environment() -> None:
    if IS_PROD and DATABASE_URL.startswith("sqlite"):
        logger.critical("%s SQLite is forbidden in production", MIGRATIONS_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")


def _load_alembic_config(alembic_config_path: Path) -> Config:
    if not alembic_config_path.exists():
        logger.critical("%s alembic config not found path=%s", MIGRATIONS_PREFIX, alembic_config_path)
        raise RuntimeError("alembic config not found")
    return Config(str(alembic_config_path))


def _should_auto_apply() -> bool:
    # sin valor explícito, la migración automática solo corre en producción
    if AUTO_APPLY_MIGRATIONS in _FALSY:
        return False
    if AUTO_APPLY_MIGRATIONS in _TRUTHY:
        return True
    return IS_PROD


def apply_migrations(*, alembic_config_path: Path) -> None:
    """Upgrade the schema to head when AUTO_APPLY_MIGRATIONS (or production) asks for it."""
    if not _should_auto_apply():
        logger.info(
            "%s auto migration skipped env=%s flag=%r",
            MIGRATIONS_PREFIX,
            ENV_NORMALIZED,
            AUTO_APPLY_MIGRATIONS,
        )
        return

    alembic_cfg = _load_alembic_config(alembic_config_path)
    alembic_cfg.attributes["configure_logger"] = False
    logger.info("%s applying migrations to head", MIGRATIONS_PREFIX)
    try:
        command.upgrade(alembic_cfg, "head")
    except CommandError as exc:
        logger.critical("%s migration apply failed: %s", MIGRATIONS_PREFIX, exc)
        raise RuntimeError("Automatic migration failed") from exc

    logger.info("%s migrations applied", MIGRATIONS_PREFIX)


def ensure_migrations_applied(*, engine: Engine, alembic_config_path: Path) -> None:
    """Refuse to start when the database revision is not the scripts' head.

    SQLite databases are built with ``create_all`` and are not versioned, so
    they (and the test environment) skip the check.
    """
    if ENV_NORMALIZED == "test" or DATABASE_URL.startswith("sqlite"):
        logger.info("%s skipped migration check env=%s", MIGRATIONS_PREFIX, ENV_NORMALIZED)
        return

    script_directory = ScriptDirectory.from_config(_load_alembic_config(alembic_config_path))
    expected_heads = set(script_directory.get_heads())

    with engine.connect() as connection:
        current_heads = set(MigrationContext.configure(connection).get_current_heads())

    if not current_heads:
        logger.critical("%s database has no alembic revision", MIGRATIONS_PREFIX)
        raise RuntimeError("Database has no migration state")

    if current_heads != expected_heads:
        logger.critical(
            "%s pending migration detected current=%s expected=%s",
            MIGRATIONS_PREFIX,
            sorted(current_heads),
            sorted(expected_heads),
        )
        raise RuntimeError("Pending migrations detected")

    logger.info("%s migration state verified revision=%s", MIGRATIONS_PREFIX, ",".join(sorted(current_heads)))
