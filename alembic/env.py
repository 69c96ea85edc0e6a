# alembic/env.py
"""
Alembic environment for mill-atlas.

1. Metadata: `config.attributes["target_metadata"]` when injected (tests),
   otherwise `mill_atlas.infrastructure.db.Base.metadata`.
2. Connection: `config.attributes["connection"]` when injected, else the
   `sqlalchemy.url` main option, else the application config converted to
   the sync psycopg driver.
"""

from __future__ import annotations

from logging.config import fileConfig

import structlog
from sqlalchemy import create_engine, pool

from alembic import context

logger = structlog.get_logger(__name__)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = config.attributes.get("target_metadata")
if target_metadata is None:
    from mill_atlas.infrastructure.db import _schema  # noqa: F401  registers the models
    from mill_atlas.infrastructure.db import Base

    target_metadata = Base.metadata


def _resolve_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    if url and url.strip():
        return url
    from mill_atlas.bootstrap import create_app_config
    from mill_atlas.management.config_utils import mask_db_url, to_sync_url

    app_config = create_app_config()
    sync_url = to_sync_url(
        app_config.maintenance_database_url or app_config.database.url
    )
    logger.debug("Using database URL from application config", url=mask_db_url(sync_url))
    return sync_url.render_as_string(hide_password=False)


def _include_object(obj, name, type_, reflected, compare_to) -> bool:
    # PostGIS owns this table.
    return not (type_ == "table" and name == "spatial_ref_sys")


def run_migrations_offline() -> None:
    context.configure(
        url=_resolve_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_object=_include_object,
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        include_object=_include_object,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    injected = config.attributes.get("connection")
    if injected is not None:
        do_run_migrations(injected)
        return
    connectable = create_engine(_resolve_url(), poolclass=pool.NullPool)
    try:
        with connectable.connect() as connection:
            do_run_migrations(connection)
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
