"""Config command implementation."""

import tomli_w
import typer
from typing_extensions import Annotated

from reelfind.config import (
    API_KEY_ENV_VAR,
    CONFIG_FILE,
    get_backend,
    init_config,
    load_config,
    set_config_value,
)

app = typer.Typer(help="Manage configuration")

REDACTED = "***REDACTED***"


@app.command()
def init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing config")
    ] = False,
):
    """Write a template config file."""
    if not init_config(overwrite=force):
        typer.echo(f"Config already exists at {CONFIG_FILE}")
        typer.echo("Use --force to overwrite.")
        return

    typer.echo(f"Created config file: {CONFIG_FILE}")
    typer.echo("Set backend.endpoint and user.id before searching.")


@app.command()
def show(
    section: Annotated[
        str | None, typer.Option("--section", "-s", help="Show a single section")
    ] = None,
):
    """Print the configuration as TOML, with the API key redacted."""
    config = load_config()

    if not config:
        typer.echo("No configuration found.")
        typer.echo(f"Run 'reelfind config init' to create {CONFIG_FILE}")
        return

    tables = {
        name: dict(values) for name, values in config.items() if isinstance(values, dict)
    }
    if "backend" in tables and get_backend(config).get("api_key"):
        tables["backend"]["api_key"] = REDACTED

    if section:
        if section not in tables:
            typer.echo(f"Section '{section}' not found.", err=True)
            raise typer.Exit(1)
        tables = {section: tables[section]}

    typer.echo(tomli_w.dumps(tables).rstrip())


@app.command("set")
def set_value(
    key: Annotated[
        str, typer.Argument(help="Key as section.name, e.g. 'defaults.search_limit'")
    ],
    value: Annotated[str, typer.Argument(help="New value")],
):
    """Set one configuration value.

    Examples:
        reelfind config set defaults.search_limit 25
        reelfind config set backend.endpoint https://example.com/graphql
    """
    try:
        set_config_value(key, value)
    except ValueError as e:
        typer.echo(f"Invalid value: {e}", err=True)
        raise typer.Exit(1)

    if key == "backend.api_key":
        typer.echo(f"Set {key} (consider {API_KEY_ENV_VAR} instead)")
    else:
        typer.echo(f"Set {key} = {value}")
