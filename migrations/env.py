"""
Alembic environment configuration for PyTrack.

The database URL comes from application settings (DATABASE_URL or .env).
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

import pytrack.models  # noqa: F401  (registers every table on Base.metadata)
from pytrack.core.config import settings
from pytrack.db.base import Base

# Alembic Config object
config = context.config

# Interpret the config file for Python logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# postgresql+asyncpg:// -> postgresql://
SYNC_DATABASE_URL = settings.sync_database_url
config.set_main_option("sqlalchemy.url", SYNC_DATABASE_URL)

# Set target metadata for autogenerate
target_metadata = Base.metadata


def run_migrations_offline():
    """Run migrations in 'offline' mode."""
    context.configure(
        url=SYNC_DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Run migrations online."""
    engine = create_engine(
        SYNC_DATABASE_URL,
        poolclass=pool.NullPool,
    )

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
