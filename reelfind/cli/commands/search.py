"""Search command implementation."""

import asyncio
import json
from datetime import date
from enum import Enum

import typer
from typing_extensions import Annotated

from reelfind.config import get_backend, get_defaults, load_config
from reelfind.config.schema import BackendConfig
from reelfind.search import (
    DateRange,
    FacetedFilters,
    GraphQLSearchBackend,
    NumericRange,
    SearchDispatcher,
    SearchResult,
    TypeTab,
    active_filter_count,
    evaluate,
    filter_by_label,
    filter_by_tab,
    type_info,
)
from reelfind.search.ranking import TAB_LABELS, tab_counts, visible_tabs


class OutputFormat(str, Enum):
    """Ways to print results."""

    summary = "summary"
    json = "json"
    ids = "ids"


def search(
    query: Annotated[str, typer.Argument(help="Search text")],
    type_: Annotated[
        TypeTab, typer.Option("--type", "-t", help="Only show one result type")
    ] = TypeTab.ALL,
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
    label: Annotated[
        str | None,
        typer.Option("--label", help="Match scene labels or shot type (substring)"),
    ] = None,
    limit: Annotated[
        int | None, typer.Option("--limit", help="Maximum results to request")
    ] = None,
    format: Annotated[
        OutputFormat, typer.Option("--format", help="Output format: summary, json, ids")
    ] = OutputFormat.summary,
):
    """Search across projects, assets, comments and messages."""
    config = load_config()
    defaults = get_defaults(config)
    backend_config = get_backend(config)

    if not backend_config.get("endpoint"):
        typer.echo("No search backend configured.", err=True)
        typer.echo("Run 'reelfind config set backend.endpoint <url>'", err=True)
        raise typer.Exit(1)

    min_length = defaults["min_query_length"]
    if len(query) < min_length:
        typer.echo(f"Query must be at least {min_length} characters.", err=True)
        raise typer.Exit(1)

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

    results = asyncio.run(
        run_search(
            query,
            backend_config,
            limit=limit or defaults["search_limit"],
            min_length=min_length,
        )
    )

    print_results(query, results, filters, label=label, tab=type_, format=format)


async def run_search(
    query: str,
    backend_config: BackendConfig,
    limit: int,
    min_length: int,
) -> list[SearchResult]:
    """Run one immediate search through a dispatcher."""
    backend = GraphQLSearchBackend(
        backend_config["endpoint"],
        api_key=backend_config.get("api_key"),
        timeout=backend_config.get("timeout", 10.0),
    )
    dispatcher = SearchDispatcher(backend, min_length=min_length, limit=limit)
    try:
        return await dispatcher.search(query)
    finally:
        await backend.aclose()


def build_filters(
    *,
    asset_type: list[str] | None = None,
    resolution: list[str] | None = None,
    frame_rate: list[str] | None = None,
    codec: list[str] | None = None,
    since: str | None = None,
    until: str | None = None,
    transcript: bool | None = None,
    min_duration: float | None = None,
    max_duration: float | None = None,
    min_size: int | None = None,
    max_size: int | None = None,
) -> FacetedFilters:
    """Build FacetedFilters from command-line options.

    Raises:
        ValueError: If a date is malformed or a range is inverted.
    """
    date_range = None
    if since or until:
        date_range = DateRange(
            start=date.fromisoformat(since) if since else None,
            end=date.fromisoformat(until) if until else None,
        )
        if date_range.start and date_range.end and date_range.start > date_range.end:
            raise ValueError("--since is after --until")

    duration = _numeric_range(min_duration, max_duration, "duration")
    file_size = _numeric_range(min_size, max_size, "size")

    return FacetedFilters(
        asset_types=set(asset_type or []),
        resolution=set(resolution or []),
        frame_rate=set(frame_rate or []),
        codec=set(codec or []),
        date_range=date_range,
        has_transcript=transcript,
        duration=duration,
        file_size=file_size,
    )


def print_results(
    query: str,
    results: list[SearchResult],
    filters: FacetedFilters,
    *,
    label: str | None = None,
    tab: TypeTab = TypeTab.ALL,
    format: OutputFormat = OutputFormat.summary,
) -> None:
    """Apply client-side stages and print what's left.

    Facets run first, then the label text stage, then the type tab.
    """
    refined = filter_by_label(evaluate(results, filters), label)
    shown = filter_by_tab(refined, tab)

    if format is OutputFormat.json:
        typer.echo(json.dumps([r.to_dict() for r in shown], indent=2, ensure_ascii=False))
        return

    if format is OutputFormat.ids:
        for result in shown:
            typer.echo(result.key)
        return

    if not results:
        typer.echo(f'No results found for "{query}"')
        return

    counts = tab_counts(refined)
    tabs = "  ".join(f"{TAB_LABELS[t]} ({counts[t]})" for t in visible_tabs(refined))
    typer.echo(tabs)

    active = active_filter_count(filters)
    if active:
        typer.echo(f"{active} filter{'s' if active != 1 else ''} active")
    typer.echo()

    if not shown:
        kind = "results" if tab is TypeTab.ALL else TAB_LABELS[tab].lower()
        typer.echo(f"No {kind} found")
    for result in shown:
        _print_result(result)

    typer.echo(f"{len(shown)} of {len(results)} results")


def _print_result(result: SearchResult) -> None:
    info = type_info(result.type)
    header = f"{info.icon} {info.label.upper()}"
    if result.project_name:
        header += f"  in {result.project_name}"
    typer.echo(header)
    typer.echo(f"   {result.title}  [{round(result.relevance * 100)}%]")
    if result.description:
        typer.echo(f"   {result.description}")
    if result.highlights:
        typer.echo(f"   > {result.highlights[0]}")
    typer.echo()


def _numeric_range(
    low: float | None, high: float | None, name: str
) -> NumericRange | None:
    if low is None and high is None:
        return None
    if low is not None and high is not None and low > high:
        raise ValueError(f"minimum {name} is greater than maximum")
    return NumericRange(min=low, max=high)
