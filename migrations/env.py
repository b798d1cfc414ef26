from logging.config import fileConfig
from sqlalchemy import create_engine
from alembic import context
import os
import sys

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from consent_api.config import Config
from consent_api.extensions import db
import consent_api.models

target_metadata = db.metadata


def get_database_url():
    """DATABASE_URL wins; otherwise the URL the app itself would connect to."""
    return os.getenv("DATABASE_URL") or Config.SQLALCHEMY_DATABASE_URI


def _configure(**kwargs) -> None:
    url = kwargs.pop("url", None) or get_database_url()
    context.configure(
        url=url if "connection" not in kwargs else None,
        target_metadata=target_metadata,
        compare_type=True,
        # sqlite needs table rebuilds for ALTER
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = get_database_url()
    connectable = create_engine(url, pool_pre_ping=True)

    with connectable.connect() as connection:
        _configure(url=url, connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
