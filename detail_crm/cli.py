"""Detail CRM admin CLI - users, schema maintenance, storage, server."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .config import settings
from .database import make_engine

app = typer.Typer(
    name="detail-crm",
    help="Detail Dynamics CRM administration",
    no_args_is_help=True,
)
console = Console()

users_app = typer.Typer(help="Login account management")
db_app = typer.Typer(help="Schema and data maintenance")
storage_app = typer.Typer(help="File storage buckets")

app.add_typer(users_app, name="users")
app.add_typer(db_app, name="db")
app.add_typer(storage_app, name="storage")

DATABASE_URL_HELP = "Database URL (defaults to CRM_DATABASE_URL)"


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def _engine(database_url: str | None):
    engine = make_engine(database_url or settings.database_url)
    try:
        yield engine
    finally:
        await engine.dispose()


@asynccontextmanager
async def _session(database_url: str | None):
    async with _engine(database_url) as engine:
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        async with factory() as session:
            yield session


# ============================================================================
# User Commands
# ============================================================================


@users_app.command("create")
def users_create(
    email: str = typer.Argument(..., help="Login email"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, help="Login password"
    ),
    first_name: str = typer.Option(None, "--first-name", "-f", help="First name"),
    full_name: str = typer.Option(None, "--full-name", help="Full name"),
    database_url: str = typer.Option(None, "--database-url", help=DATABASE_URL_HELP),
):
    """Create a login account with a confirmed email."""
    from .services import user_svc

    async def _create():
        async with _session(database_url) as db:
            return await user_svc.create_user(
                db, email, password, first_name=first_name, full_name=full_name
            )

    try:
        user = asyncio.run(_create())
    except user_svc.UserExistsError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Created user {user.email}[/green] (id {user.id})")


@users_app.command("list")
def users_list(
    database_url: str = typer.Option(None, "--database-url", help=DATABASE_URL_HELP),
):
    """List login accounts."""
    from .services import user_svc

    async def _list():
        async with _session(database_url) as db:
            return await user_svc.list_users(db)

    users = asyncio.run(_list())
    table = Table(title=f"Users ({len(users)})")
    table.add_column("Email", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="white")
    table.add_column("Created", style="green")
    table.add_column("Active", style="yellow")

    for user in users:
        table.add_row(
            user.email,
            str(user.id),
            user.full_name or user.first_name or "-",
            user.created_at.strftime("%Y-%m-%d %H:%M") if user.created_at else "-",
            "yes" if user.is_active else "no",
        )

    console.print(table)


# ============================================================================
# Database Commands
# ============================================================================


@db_app.command("init")
def db_init(
    revision: str = typer.Option("head", "--revision", "-r", help="Migration revision to upgrade to"),
    database_url: str = typer.Option(None, "--database-url", help=DATABASE_URL_HELP),
):
    """Create or upgrade the schema by running the alembic migrations."""
    from .services import schema_svc

    schema_svc.upgrade(database_url or settings.database_url, revision)
    console.print(f"[green]Database upgraded to {revision}[/green]")


@db_app.command("add-name-columns")
def db_add_name_columns(
    database_url: str = typer.Option(
        None,
        "--database-url",
        help="Database URL (defaults to a PostgreSQL URL built from DB_PASSWORD, then CRM_DATABASE_URL)",
    ),
):
    """Add first_name / last_name columns to customers (safe to re-run)."""
    from .services import schema_svc

    url = database_url or settings.admin_database_url() or settings.database_url
    added = schema_svc.add_name_columns(url)
    if added:
        console.print(f"[green]Added columns: {', '.join(added)}[/green]")
    else:
        console.print("[yellow]Columns already present - nothing to do[/yellow]")


@db_app.command("migrate-customer-names")
def db_migrate_customer_names(
    database_url: str = typer.Option(None, "--database-url", help=DATABASE_URL_HELP),
):
    """Split each customer's name into first and last name."""
    from .services import schema_svc

    async def _migrate():
        async with _session(database_url) as db:
            return await schema_svc.migrate_customer_names(db)

    result = asyncio.run(_migrate())
    console.print(
        f"[green]Updated {result.updated}[/green], skipped {result.skipped} "
        f"of {result.total} customers"
    )


# ============================================================================
# Storage Commands
# ============================================================================


@storage_app.command("list")
def storage_list(
    database_url: str = typer.Option(None, "--database-url", help=DATABASE_URL_HELP),
):
    """List storage buckets."""
    from .services import storage_svc

    async def _list():
        async with _session(database_url) as db:
            return await storage_svc.list_buckets(db)

    buckets = asyncio.run(_list())
    table = Table(title=f"Buckets ({len(buckets)})")
    table.add_column("Name", style="cyan")
    table.add_column("Public", style="yellow")
    table.add_column("Size limit", style="green")
    for bucket in buckets:
        table.add_row(
            bucket.name,
            "yes" if bucket.public else "no",
            f"{bucket.file_size_limit:,} bytes" if bucket.file_size_limit else "-",
        )
    console.print(table)


@storage_app.command("ensure-bucket")
def storage_ensure_bucket(
    name: str = typer.Argument("customer-files", help="Bucket name"),
    public: bool = typer.Option(False, "--public", help="Make bucket files publicly readable"),
    file_size_limit: int = typer.Option(
        52_428_800, "--file-size-limit", help="Max upload size in bytes"
    ),
    database_url: str = typer.Option(None, "--database-url", help=DATABASE_URL_HELP),
):
    """Create a storage bucket if it does not exist."""
    from .services import storage_svc

    async def _ensure():
        async with _session(database_url) as db:
            return await storage_svc.ensure_bucket(
                db,
                name,
                settings.storage_root,
                public=public,
                file_size_limit=file_size_limit,
            )

    try:
        bucket, created = asyncio.run(_ensure())
    except storage_svc.StorageError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if created:
        console.print(f"[green]Created bucket {bucket.name}[/green]")
    else:
        console.print(f"[yellow]Bucket {bucket.name} already exists[/yellow]")


# ============================================================================
# Server
# ============================================================================


@app.command("serve")
def serve(
    port: int = typer.Option(3000, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Launch the CRM web app."""
    import uvicorn

    console.print(f"[bold cyan]Starting {settings.app_title} at http://{host}:{port}[/bold cyan]")
    uvicorn.run("detail_crm.app:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
