# src/sagascribe/cli.py
"""
Saga Scribe Command Line Interface (CLI).

This module implements the terminal interface using `typer` and `rich`.

Features
--------
- **serve**: Run the timeline service, optionally seeded from a JSON file.
- **show**: Fetch a series' timeline and render one of the three views.
- **reorder**: Renumber one book group in the given order (what a
  drag-and-drop does) and submit it as a single batch.

Usage
-----
    $ sagascribe serve --seed samples/ember_crown.json
    $ sagascribe show 1 --mode narrative
    $ sagascribe show 1 --mode character --character 3
    $ sagascribe reorder 1 12 10 11
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, cast

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sagascribe.client.http import TimelineApiClient
from sagascribe.core.contracts.timeline import TimelineEvent
from sagascribe.core.contracts.view import VIEW_MODES, TimelineView, ViewMode
from sagascribe.core.errors import ApiError
from sagascribe.core.settings import load_settings
from sagascribe.core.timeline.reorder import renumber
from sagascribe.core.timeline.service import TimelineService

# Ensure env vars (like SAGASCRIBE_API_URL) are loaded before any logic runs
load_dotenv()

app = typer.Typer(
    help="Saga Scribe: series timelines in chronological, narrative and character order.",
    rich_markup_mode="markdown",
)
console = Console()


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _make_client(api_url: str | None) -> TimelineApiClient:
    """Build the REST client; `api_url` overrides `SAGASCRIBE_API_URL`."""
    s = load_settings()
    if api_url:
        s = s.model_copy(update={"api_url": api_url})
    return TimelineApiClient.from_settings(s)


def _events_table(title: str, events: list[TimelineEvent]) -> Table:
    table = Table(title=title, title_justify="left", expand=False)
    table.add_column("Pos", justify="right", style="dim")
    table.add_column("ID", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Date")
    table.add_column("Type")
    table.add_column("Importance")
    table.add_column("Plot", justify="center")

    for e in events:
        table.add_row(
            str(e.position),
            str(e.id),
            e.title,
            e.date or "",
            e.event_type,
            e.importance,
            "★" if e.is_plot_point else "",
        )
    if not events:
        table.add_row("", "", "[dim]No events yet.[/dim]", "", "", "", "")
    return table


def _render_view(view: TimelineView) -> None:
    """Render a projection: one table per book group, or a single table."""
    if view.groups is not None:
        for group in view.groups:
            console.print(_events_table(group.title, group.events))
            console.print("")
        return

    title = "Chronological order"
    if view.mode == "character" and view.selected_character_id is not None:
        title = f"Character #{view.selected_character_id}"
    console.print(_events_table(title, view.events or []))


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address.")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port.")] = None,
    seed: Annotated[
        Path | None,
        typer.Option(
            "--seed",
            exists=True,
            dir_okay=False,
            readable=True,
            help="JSON seed document with series, books, characters and events.",
        ),
    ] = None,
) -> None:
    """Run the timeline service with uvicorn."""
    from sagascribe.api import server

    server.main(host=host, port=port, seed_file=seed)


@app.command()  # type: ignore[misc]
def show(
    series_id: Annotated[int, typer.Argument(help="Series to display.")],
    mode: Annotated[
        str,
        typer.Option("--mode", "-m", help="chronological | narrative | character"),
    ] = "chronological",
    character: Annotated[
        int | None,
        typer.Option("--character", "-c", help="Character id for the character view."),
    ] = None,
    api_url: Annotated[
        str | None, typer.Option("--api-url", help="Override SAGASCRIBE_API_URL.")
    ] = None,
) -> None:
    """Fetch a series' timeline and render the requested view."""
    if mode not in VIEW_MODES:
        console.print(f"[bold red]Unknown view mode:[/bold red] {mode}")
        raise typer.Exit(code=2)

    try:
        with _make_client(api_url) as client:
            service = TimelineService(client)
            view = service.view(series_id, cast(ViewMode, mode), selected_character_id=character)
    except ApiError as e:
        console.print(f"\n[bold red]❌ Timeline Error:[/bold red] {e.message}")
        raise typer.Exit(code=1) from e

    console.print(
        Panel.fit(
            f"[bold cyan]Series {series_id}[/bold cyan] · {mode} view",
            border_style="cyan",
        )
    )
    _render_view(view)


@app.command()  # type: ignore[misc]
def reorder(
    series_id: Annotated[int, typer.Argument(help="Series the events belong to.")],
    event_ids: Annotated[
        list[int], typer.Argument(help="Event ids of one book group, in their new order.")
    ],
    api_url: Annotated[
        str | None, typer.Option("--api-url", help="Override SAGASCRIBE_API_URL.")
    ] = None,
) -> None:
    """
    Renumber one book group in the given order and submit it as one batch.

    Every listed event gets `position = index + 1`.
    """
    try:
        with _make_client(api_url) as client:
            service = TimelineService(client)
            by_id = {e.id: e for e in service.series_events(series_id)}
            missing = [i for i in event_ids if i not in by_id]
            if missing:
                console.print(
                    f"[bold red]Unknown events in series {series_id}:[/bold red] {missing}"
                )
                raise typer.Exit(code=1)

            ordered = [by_id[i] for i in event_ids]
            updates = renumber(ordered)
            result = service.reorder(series_id, ordered)
    except (ApiError, ValueError) as e:
        console.print(f"\n[bold red]❌ Reorder Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    if result.is_err():
        console.print(f"\n[bold red]❌ {result.unwrap_err().describe()}[/bold red]")
        raise typer.Exit(code=1)

    table = Table(title="New positions", title_justify="left")
    table.add_column("ID", justify="right")
    table.add_column("Position", justify="right")
    for u in updates:
        table.add_row(str(u.id), str(u.position))
    console.print(table)
    console.print(f"[bold green]✅ Reordered {len(updates)} events.[/bold green]")


if __name__ == "__main__":
    app()
