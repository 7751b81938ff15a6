"""Alembic environment for the Tocafy schema.

Migrations run against ``settings.DATABASE_URL`` (PostgreSQL in deployment),
not the URL in alembic.ini. The six Tocafy tables (profiles, shows, songs,
song_requests, moderation_configs, show_activity) are imported below so that
``alembic revision --autogenerate`` diffs against the full model set,
including the status enums and the ``shows.version`` lock column.
"""
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

# Import our app's config and models
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tocafy.config import settings
from tocafy.database import Base

# Import all models so they register with Base.metadata
from tocafy.models.profile import Profile  # noqa: F401
from tocafy.models.show import Show  # noqa: F401
from tocafy.models.song import Song  # noqa: F401
from tocafy.models.song_request import SongRequest  # noqa: F401
from tocafy.models.moderation_config import ModerationConfig  # noqa: F401
from tocafy.models.show_activity import ShowActivity  # noqa: F401

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


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


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
