"""Alembic environment configuration anchored in the IO layer.

This script loads the canonical Work History Verification settings so
migrations always run against the same record store used by the
application. Logging delegates to the structlog pipeline defined in
work_history_verification.utils.logging.
"""

from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool

# Ensure src/ is importable (parents[3] -> repo root)
PROJECT_ROOT = Path(__file__).resolve().parents[3]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from work_history_verification.config import get_settings  # noqa: E402
from work_history_verification.infrastructure.verification.repository import (  # noqa: E402
    metadata,
)
from work_history_verification.utils.logging import get_logger  # noqa: E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = get_logger("work_history_verification.io.schema.migrations.env")

try:
    settings = get_settings()
    config.set_main_option("sqlalchemy.url", settings.get_database_connection_string())
    logger.info("migrations.database_url_loaded", dialect=settings.database_uri.split(":", 1)[0])
except Exception as exc:  # pragma: no cover - settings errors fall back to alembic.ini
    logger.warning(
        "migrations.settings_unavailable",
        error=str(exc),
    )

target_metadata = metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()

    logger.info("migrations.completed_offline")


def run_migrations_online() -> None:
    """Run migrations in 'online' mode using a SQLAlchemy Engine."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()

    logger.info("migrations.completed_online")


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
