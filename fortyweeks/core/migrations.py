"""Alembic helpers used at startup and by the CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Engine

from fortyweeks.core.config import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class SchemaStatus:
    """Revision stamped in the database vs. the newest revision on disk."""

    current: str | None
    head: str

    @property
    def is_current(self) -> bool:
        return self.current == self.head


class MigrationError(RuntimeError):
    """Raised when an upgrade finishes without reaching head."""


def alembic_config(database_url: str | None = None) -> Config:
    ini_path = PROJECT_ROOT / "alembic.ini"
    if not ini_path.is_file():
        raise FileNotFoundError(f"alembic.ini not found at {ini_path}")
    config = Config(str(ini_path))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", database_url or settings.DATABASE_URL)
    return config


def schema_status(engine: Engine) -> SchemaStatus:
    # Revisions form a single linear chain; get_current_head raises otherwise.
    head = ScriptDirectory.from_config(alembic_config()).get_current_head()
    with engine.connect() as connection:
        current = MigrationContext.configure(connection).get_current_revision()
    return SchemaStatus(current=current, head=head)


def ensure_migrations(engine: Engine, auto_migrate: bool) -> SchemaStatus:
    """
    Bring the schema to head when auto_migrate is on.

    Returns the status after any upgrade. With auto_migrate off the database
    is left untouched and the caller decides how loud to be about it.
    """
    status = schema_status(engine)
    if status.is_current or not auto_migrate:
        return status

    logger.info("Upgrading database schema from %s to %s", status.current or "empty", status.head)
    command.upgrade(alembic_config(), "head")

    status = schema_status(engine)
    if not status.is_current:
        raise MigrationError(f"Schema is at {status.current} after upgrade, expected {status.head}")
    return status
