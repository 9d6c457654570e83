"""
Alembic Migration Environment

What happens here:
------------------
1. Load application settings (database URL)
2. Import the carousel models so their tables are on Base.metadata
3. Run migrations offline (emit SQL) or online (async engine)
"""

import asyncio
import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

# Make lifestyle_cms importable when alembic runs from backend/ without an install
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from lifestyle_cms.core.config import settings  # noqa: E402
from lifestyle_cms.db.base import Base  # noqa: E402

# Registers carousels / carousel_items on Base.metadata
from lifestyle_cms.models import Carousel, CarouselItem  # noqa: E402,F401

config = context.config

# The URL always comes from settings; alembic.ini carries no credentials
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.

    Emits the SQL to stdout instead of executing it, for review or for
    applying by hand.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Create an async engine (asyncpg) and run the migrations through run_sync."""
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
