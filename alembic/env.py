from logging.config import fileConfig

from alembic import context

# Import the Base and models for autogenerate support
from fortyweeks.db.base import Base
# Import all models here so they are registered with Base.metadata
import fortyweeks.db.models  # noqa: F401

from fortyweeks.core.config import settings
from fortyweeks.db.session import build_engine

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Override sqlalchemy.url with the value from settings
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

# Interpret the config file for Python logging without silencing app loggers
# when migrations run at startup.
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Emits SQL to the script output instead of executing it.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode.

    Uses the application's engine factory so SQLite gets the same
    connection settings (foreign keys, thread checks) as the API.
    """
    connectable = build_engine(config.get_main_option("sqlalchemy.url"))

    with connectable.connect() as connection:
        # SQLite cannot ALTER most columns in place; batch mode rebuilds tables.
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True,
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
