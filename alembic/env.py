"""Alembic environment: DATABASE_URL comes from application settings, metadata from designhub.models."""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

os.environ.setdefault("APP_ENV", "dev")
from designhub.core.config import get_settings
from designhub.models import (  # noqa: F401  (registers every table on Base.metadata)
    Base,
    Contest,
    File,
    Notification,
    PracticeRequest,
    Proposal,
    RefreshToken,
    User,
)

config = context.config
# alembic.ini carries no logging sections; only configure logging when a full ini is supplied.
if config.config_file_name is not None and config.file_config.has_section("formatters"):
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """-x dburl=... on the command line overrides the configured DATABASE_URL."""
    return context.get_x_argument(as_dictionary=True).get("dburl") or get_settings().DATABASE_URL


def _configure_kwargs(url: str) -> dict:
    # SQLite cannot ALTER most constraints in place; batch mode recreates the table.
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    url = get_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = get_url()
    connectable = create_engine(url, poolclass=NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_kwargs(url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
