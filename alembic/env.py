"""
Alembic migration environment for the route engine.

The target database comes from, in order: `-x db_url=...` on the command
line, sqlalchemy.url in alembic.ini, then DATABASE_URL_SYNC.
"""
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

from route_engine.core.config import get_settings
from route_engine.db.database import Base
import route_engine.models.saved_route  # noqa: F401  (registers SavedRouteRecord on Base.metadata)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _resolve_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("db_url")
    return override or config.get_main_option("sqlalchemy.url") or get_settings().database_url_sync


def run_offline(url: str) -> None:
    """Emit SQL to stdout instead of executing it."""
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    config.set_main_option("sqlalchemy.url", url)
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline(_resolve_url())
else:
    run_online(_resolve_url())
