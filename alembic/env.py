"""
Alembic environment for the club database.

The target URL comes from ``-x url=...`` on the command line or, by
default, from the backend settings (``BACKEND_URL``/``BACKEND_KEY``).
The Postgres capacity triggers are created by the migrations themselves
and are not part of the SQLModel metadata.
"""

from logging.config import fileConfig
from typing import Optional

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlmodel import SQLModel

from club.core.config import settings
# Registers every club table on SQLModel.metadata
from club.db.base import *  # noqa

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    override: Optional[str] = context.get_x_argument(as_dictionary=True).get("url")
    url = override or settings.DATABASE_URL
    if url is None:
        raise RuntimeError("BACKEND_URL and BACKEND_KEY must be set (or pass -x url=...) to run migrations")
    return url


config.set_main_option("sqlalchemy.url", _database_url().replace("%", "%%"))

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Emit the migration SQL for the configured URL without connecting."""
    context.configure(url=config.get_main_option("sqlalchemy.url"), target_metadata=target_metadata,
                      literal_binds=True, compare_type=True, dialect_opts={"paramstyle": "named"}, )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Apply migrations over a live connection.

    SQLite cannot ALTER constrained tables in place, so batch mode is
    used there.
    """
    connectable = engine_from_config(config.get_section(config.config_ini_section, {}), prefix="sqlalchemy.",
                                     poolclass=pool.NullPool, )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True,
                          render_as_batch=connection.dialect.name == "sqlite", )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
