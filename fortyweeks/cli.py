"""CLI tools for 40Weeks administration."""

import asyncio

import click

from fortyweeks.core.config import settings
from fortyweeks.core.migrations import ensure_migrations, schema_status
from fortyweeks.db.session import SessionLocal, engine
from fortyweeks.services import auth_service


@click.group()
def cli():
    """40Weeks CLI tools."""
    pass


@cli.command()
def migrate():
    """
    Upgrade the database schema to the latest revision.

    Example:
        python -m fortyweeks.cli migrate
    """
    status = schema_status(engine)
    if status.is_current:
        click.echo(f"✓ Database already at head ({status.head})")
        return

    status = ensure_migrations(engine, auto_migrate=True)
    click.echo(f"✓ Migrated database to {status.current}")
    click.echo(f"  URL: {settings.DATABASE_URL}")


@cli.command()
@click.option("--email", required=True, help="Email of an existing user")
@click.option("--revoke", is_flag=True, help="Remove admin rights instead")
def create_admin(email: str, revoke: bool):
    """
    Grant (or revoke) admin rights for a registered user.

    Example:
        python -m fortyweeks.cli create-admin --email "owner@example.com"
    """
    db = SessionLocal()
    try:
        user = auth_service.get_user_by_email(db, email)
        if not user:
            click.echo(f"❌ User not found: {email}")
            return

        auth_service.set_admin(db, user, is_admin=not revoke)
        db.commit()
        state = "revoked from" if revoke else "granted to"
        click.echo(f"✓ Admin rights {state} {user.email}")

    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--limit", default=settings.WORKER_BATCH_SIZE, help="Maximum jobs to run")
def run_jobs_once(limit: int):
    """
    Process one batch of pending jobs and exit.

    Example:
        python -m fortyweeks.cli run-jobs-once --limit 50
    """
    from fortyweeks.worker import run_pending_jobs

    with SessionLocal() as db:
        completed, failed = asyncio.run(run_pending_jobs(db, limit=limit))
    click.echo(f"✓ Jobs completed: {completed}")
    if failed:
        click.echo(f"❌ Jobs failed: {failed}")


if __name__ == "__main__":
    cli()
