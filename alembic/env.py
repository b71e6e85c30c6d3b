from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv

from homelib.db.base import Base
from homelib.db import models  # noqa
from homelib.db.session import build_database_url, create_db_engine, ensure_database_dir

config = context.config

# Programmatic runs (homelib.db.migrate) hand over an open connection and
# keep the application's logging configuration untouched.
if config.config_file_name is not None and "connection" not in config.attributes:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def _resolve_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url

    load_dotenv()
    from apps.api.core.config import get_settings

    settings = get_settings()
    return build_database_url(settings.DATABASE_FILE, settings.DATABASE_URL)


def _configure_and_run(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline():
    context.configure(
        url=_resolve_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connection = config.attributes.get("connection")
    if connection is not None:
        _configure_and_run(connection)
        return

    url = _resolve_url()
    ensure_database_dir(url)
    connectable = create_db_engine(url)
    with connectable.connect() as connection:
        _configure_and_run(connection)
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
