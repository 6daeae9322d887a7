"""Main CLI entry point for reelfind."""

import typer
from typing_extensions import Annotated

from reelfind import __version__
from reelfind.cli import commands
from reelfind.config import load_config
from reelfind.log import configure_logging

app = typer.Typer(
    name="reelfind",
    help="Search projects, assets and conversations across your productions",
    no_args_is_help=True,
)

# Register command groups
app.command(name="search")(commands.search.search)
app.add_typer(commands.saved.app, name="saved")
app.add_typer(commands.config.app, name="config")


@app.callback()
def main_callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
):
    """Set up logging from the [logging] config section."""
    logging_config = load_config().get("logging", {})
    level = "DEBUG" if verbose else logging_config.get("level", "WARNING")
    configure_logging(level, logging_config.get("file"))


@app.command()
def version():
    """Show version information."""
    typer.echo(f"reelfind version {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
