from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from db.base import Base
from db.config import load_env_files, normalize_postgres_url, resolve_database_url
from db.models import (  # noqa: F401  imports trigger Base.metadata registration
    PageConfiguration,
    ScanReport,
)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _migration_url() -> str:
    """
    Pick the report store URL for this migration run.

    ``-x db_url=...`` wins, then ALEMBIC_DATABASE_URL, then sqlalchemy.url
    from alembic.ini, then the application's own resolution order.
    """

    load_env_files()

    candidates = (
        context.get_x_argument(as_dictionary=True).get("db_url"),
        os.getenv("ALEMBIC_DATABASE_URL"),
        config.get_main_option("sqlalchemy.url"),
    )
    for candidate in candidates:
        if candidate and candidate.strip():
            url = normalize_postgres_url(candidate.strip())
            break
    else:
        url = resolve_database_url()

    if not url.startswith("postgresql"):
        raise RuntimeError("Scan report migrations target PostgreSQL only.")
    return url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(
        url=_migration_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _migration_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
