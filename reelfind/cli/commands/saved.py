"""Saved search command implementation.

Saved searches are stored locally and listed with the same visibility
rules as in the web app: organization-visible searches plus your own.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

import typer
from typing_extensions import Annotated

from reelfind.config import get_backend, get_defaults, get_user, load_config
from reelfind.poller import Poller
from reelfind.saved import (
    JsonSavedSearchStore,
    SavedSearch,
    SavedSearchError,
    SavedSearchManager,
    SavedSearchNotFoundError,
    Scope,
    UserIdentity,
    Visibility,
)
from reelfind.search import active_filter_count, deserialize_filters
from reelfind.search.facets import FilterDecodeError

from .search import OutputFormat, build_filters, print_results, run_search

app = typer.Typer(help="Manage saved searches")


@app.command("list")
def list_cmd(
    project: Annotated[
        str | None, typer.Option("--project", help="Include only this project's searches")
    ] = None,
):
    """List saved searches visible to you."""
    manager = _manager()
    items = _run(manager.list_visible(project_id=project))
    _display_list(items)


@app.command()
def save(
    name: Annotated[str, typer.Argument(help="Name for the saved search")],
    query: Annotated[str, typer.Option("--query", "-q", help="Search text")] = "",
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="Optional description")
    ] = None,
    asset_type: Annotated[
        list[str] | None, typer.Option("--asset-type", help="Asset type (repeatable)")
    ] = None,
    resolution: Annotated[
        list[str] | None, typer.Option("--resolution", help="Resolution (repeatable)")
    ] = None,
    frame_rate: Annotated[
        list[str] | None, typer.Option("--frame-rate", help="Frame rate (repeatable)")
    ] = None,
    codec: Annotated[
        list[str] | None, typer.Option("--codec", help="Codec (repeatable)")
    ] = None,
    since: Annotated[
        str | None, typer.Option("--since", help="Start date (YYYY-MM-DD)")
    ] = None,
    until: Annotated[
        str | None, typer.Option("--until", help="End date (YYYY-MM-DD)")
    ] = None,
    transcript: Annotated[
        bool | None,
        typer.Option(
            "--transcript/--no-transcript", help="Require or exclude transcripts"
        ),
    ] = None,
    min_duration: Annotated[
        float | None, typer.Option("--min-duration", help="Minimum seconds")
    ] = None,
    max_duration: Annotated[
        float | None, typer.Option("--max-duration", help="Maximum seconds")
    ] = None,
    min_size: Annotated[
        int | None, typer.Option("--min-size", help="Minimum file size in bytes")
    ] = None,
    max_size: Annotated[
        int | None, typer.Option("--max-size", help="Maximum file size in bytes")
    ] = None,
    shared: Annotated[
        bool, typer.Option("--shared", help="Make visible to the whole organization")
    ] = False,
    project: Annotated[
        str | None, typer.Option("--project", help="Scope the search to a project")
    ] = None,
):
    """Save a query and facet configuration under a name."""
    try:
        filters = build_filters(
            asset_type=asset_type,
            resolution=resolution,
            frame_rate=frame_rate,
            codec=codec,
            since=since,
            until=until,
            transcript=transcript,
            min_duration=min_duration,
            max_duration=max_duration,
            min_size=min_size,
            max_size=max_size,
        )
    except ValueError as e:
        typer.echo(f"Invalid filter: {e}", err=True)
        raise typer.Exit(1)

    manager = _manager()
    saved = _run(
        manager.save(
            name,
            description,
            query,
            filters,
            scope=Scope.PROJECT if project else Scope.ORGANIZATION,
            visibility=Visibility.ORGANIZATION if shared else Visibility.PRIVATE,
            project_id=project,
        )
    )
    typer.echo(f"Saved search '{saved.name}' ({saved.id})")


@app.command()
def run(
    saved_id: Annotated[str, typer.Argument(help="Saved search id")],
    format: Annotated[
        OutputFormat, typer.Option("--format", help="Output format: summary, json, ids")
    ] = OutputFormat.summary,
):
    """Load a saved search and run it."""
    config = load_config()
    defaults = get_defaults(config)
    backend_config = get_backend(config)

    if not backend_config.get("endpoint"):
        typer.echo("No search backend configured.", err=True)
        raise typer.Exit(1)

    manager = _manager()

    async def _load_and_search():
        saved = await _find_visible(manager, saved_id)
        restored = await manager.load(saved)

        results = []
        if len(restored.query) >= defaults["min_query_length"]:
            results = await run_search(
                restored.query,
                backend_config,
                limit=defaults["search_limit"],
                min_length=defaults["min_query_length"],
            )
        await manager.drain()
        return restored, results

    restored, results = _run(_load_and_search())

    if not restored.query:
        typer.echo("Saved search has no query text; nothing to search.")
        return

    print_results(restored.query, results, restored.filters, format=format)


@app.command()
def delete(
    saved_id: Annotated[str, typer.Argument(help="Saved search id")],
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")
    ] = False,
):
    """Delete a saved search. This cannot be undone."""
    manager = _manager()

    def confirm(saved: SavedSearch) -> bool:
        if yes:
            return True
        return typer.confirm(
            f"Delete saved search '{saved.name}'? This cannot be undone."
        )

    async def _delete() -> bool:
        await _find_visible(manager, saved_id)
        return await manager.delete(saved_id, confirm)

    if _run(_delete()):
        typer.echo(f"Deleted saved search {saved_id}")
    else:
        typer.echo("Cancelled.")


@app.command()
def pin(saved_id: Annotated[str, typer.Argument(help="Saved search id")]):
    """Pin a saved search to the top of the list."""
    saved = _run(_set_pinned(_manager(), saved_id, True))
    typer.echo(f"Pinned '{saved.name}'")


@app.command()
def unpin(saved_id: Annotated[str, typer.Argument(help="Saved search id")]):
    """Unpin a saved search."""
    saved = _run(_set_pinned(_manager(), saved_id, False))
    typer.echo(f"Unpinned '{saved.name}'")


@app.command()
def watch(
    interval: Annotated[
        float | None, typer.Option("--interval", help="Seconds between refreshes")
    ] = None,
):
    """Re-list saved searches periodically until interrupted."""
    manager = _manager()
    interval = interval or get_defaults(load_config())["poll_interval"]

    async def refresh() -> None:
        items = await manager.list_visible()
        typer.echo(f"--- {len(items)} saved searches ---")
        _display_list(items)

    async def _watch() -> None:
        async with Poller(refresh, interval=interval) as poller:
            await poller.wait()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        typer.echo("Stopped.")


def _manager() -> SavedSearchManager:
    """Build a manager for the configured user."""
    user = get_user(load_config())
    if user is None:
        typer.echo("No user configured.", err=True)
        typer.echo("Run 'reelfind config set user.id <your-id>'", err=True)
        raise typer.Exit(1)

    identity = UserIdentity(
        id=user["id"],
        email=user.get("email"),
        organization_id=user.get("organization_id"),
    )
    return SavedSearchManager(JsonSavedSearchStore(), identity)


async def _find_visible(manager: SavedSearchManager, saved_id: str) -> SavedSearch:
    for saved in await manager.list_visible():
        if saved.id == saved_id:
            return saved
    raise SavedSearchNotFoundError(f"Saved search {saved_id} not found")


async def _set_pinned(
    manager: SavedSearchManager, saved_id: str, pinned: bool
) -> SavedSearch:
    await _find_visible(manager, saved_id)
    return await manager.set_pinned(saved_id, pinned)


def _run(coro: Coroutine[Any, Any, Any]) -> Any:
    """Run a coroutine, turning saved-search errors into a CLI exit."""
    try:
        return asyncio.run(coro)
    except SavedSearchError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _display_list(items: list[SavedSearch]) -> None:
    if not items:
        typer.echo("No saved searches.")
        return

    for saved in items:
        marker = "* " if saved.is_pinned else "  "
        typer.echo(f"{marker}{saved.name}  ({saved.id})")
        if saved.description:
            typer.echo(f"    {saved.description}")

        details = [f'query "{saved.search_query}"' if saved.search_query else "no query"]
        try:
            active = active_filter_count(deserialize_filters(saved.filters))
            if active:
                details.append(f"{active} filter{'s' if active != 1 else ''}")
        except FilterDecodeError:
            details.append("unreadable filters")
        details.append(f"{saved.visibility.value}")
        details.append(f"used {saved.usage_count}x")
        typer.echo(f"    {', '.join(details)}")
