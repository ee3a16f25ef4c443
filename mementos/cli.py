#!/usr/bin/env python3
"""
Mementos Management CLI
-----------------------

Command-line interface for setting up and running the service.

Commands:
    - init: Create the database schema
    - reset: Drop and recreate every table (asks for confirmation)
    - check: Test the database connection
    - serve: Run the HTTP API with uvicorn

Usage:
    # Create the schema in the default location (~/.mementos)
    mementos init

    # Use another database
    mementos --database-url sqlite:////tmp/m.db check

    # Run the API
    mementos serve --port 8000
"""
# --- Third party imports ---
import click
import uvicorn

# --- Local imports ---
from mementos import __version__
from mementos.core.config import Settings
from mementos.core.exceptions import MementosError
from mementos.core.logging_manager import MementosLogger, handle_cli_error
from mementos.database import MementosDB


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a YAML configuration file",
)
@click.option("--database-url", default=None, help="SQLAlchemy database URL")
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Path to log directory",
)
@click.option("--verbose", is_flag=True, help="Show detailed errors and tracebacks")
@click.version_option(__version__, prog_name="mementos")
@click.pass_context
def cli(ctx, config_path, database_url, log_dir, verbose):
    """Mementos management CLI"""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj.setdefault("logger", None)

    try:
        overrides = {}
        if database_url:
            overrides["database_url"] = database_url
        if log_dir:
            overrides["log_dir"] = log_dir
        settings = Settings.load(config_path, **overrides)
    except MementosError as e:
        handle_cli_error(ctx, e, "load_config")

    ctx.obj["settings"] = settings
    ctx.obj["logger"] = MementosLogger(settings.log_dir, component_name="cli")


def get_db(ctx) -> MementosDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        ctx.obj["db"] = MementosDB.from_settings(ctx.obj["settings"], logger=ctx.obj["logger"])
        ctx.call_on_close(ctx.obj["db"].dispose)
    return ctx.obj["db"]


@cli.command()
@click.pass_context
def init(ctx):
    """Create the database schema."""
    try:
        db = get_db(ctx)
        db.create_schema()
        click.echo(f"✅ Database initialized: {db._safe_url()}")
    except MementosError as e:
        handle_cli_error(ctx, e, "init")


@cli.command()
@click.confirmation_option(prompt="This will delete ALL data. Continue?")
@click.pass_context
def reset(ctx):
    """Drop all tables and recreate them empty."""
    try:
        db = get_db(ctx)
        db.reset()
        click.echo("✅ Database reset")
    except MementosError as e:
        handle_cli_error(ctx, e, "reset")


@cli.command()
@click.pass_context
def check(ctx):
    """Test the database connection."""
    try:
        get_db(ctx).check_connection()
        click.echo("✅ Successfully connected to database")
    except MementosError as e:
        handle_cli_error(ctx, e, "check")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port")
@click.pass_context
def serve(ctx, host, port):
    """Run the HTTP API."""
    from mementos.api import create_app

    try:
        app = create_app(ctx.obj["settings"])
    except MementosError as e:
        handle_cli_error(ctx, e, "serve")
        return

    click.echo(f"🚀 Serving Mementos on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    cli(obj={})
