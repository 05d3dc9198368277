"""
Anime Commands - Search, info, episode listing and stream extraction.

Each command builds an :class:`AniverseService` from the loaded settings,
runs one service call and prints the result as Rich tables or as JSON.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

import typer

from aniverse.cli.context import get_config_manager, get_options
from aniverse.core.exceptions import AniverseError
from aniverse.core.service import AniverseService
from aniverse.ui import UIComponents, get_console, handle_error


logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_service(action: Callable[[AniverseService], Awaitable[T]], context: str) -> T:
    """
    Run one service coroutine, presenting errors and exiting on failure.

    Args:
        action: Coroutine function receiving the service
        context: Description of the operation for error panels
    """
    settings = get_config_manager().settings

    async def runner() -> T:
        async with AniverseService.from_settings(settings) as service:
            return await action(service)

    try:
        return asyncio.run(runner())
    except AniverseError as e:
        code = handle_error(e, context, show_traceback=get_options().debug)
        raise typer.Exit(code) from e


def print_json(data: Any) -> None:
    get_console().print_json(data=data)


def search(
    query: str = typer.Argument(..., help="Title to search for, or an AniList id"),
    page: int = typer.Option(1, "--page", "-p", min=1, help="Result page"),
    per_page: int = typer.Option(10, "--per-page", "-n", min=1, max=50, help="Results per page"),
) -> None:
    """
    🔍 Search AniList for anime.

    Examples:

        aniverse search "attack on titan"

        aniverse search 16498
    """
    results = run_service(lambda service: service.search(query, page=page, per_page=per_page), f"Searching '{query}'")

    if get_options().json_output:
        print_json([entry.model_dump(mode="json", by_alias=True) for entry in results])
        return

    console = get_console()
    if not results:
        console.print(f"[yellow]No results found for '{query}'[/yellow]")
        return
    console.print(UIComponents().create_catalog_table(results, title=f"🔍 Search Results for '{query}'"))


def info(
    anilist_id: int = typer.Argument(..., help="AniList id"),
) -> None:
    """📋 Show a work with its merged episode list."""
    anime_info = run_service(lambda service: service.get_anime_info(anilist_id), f"Loading AniList {anilist_id}")

    if get_options().json_output:
        print_json(anime_info.model_dump(mode="json", by_alias=True))
        return

    ui = UIComponents()
    console = get_console()
    console.print(ui.create_info_panel(anime_info))
    if anime_info.episodes:
        console.print(ui.create_episodes_table(anime_info.episodes))


def episodes(
    anilist_id: int = typer.Argument(..., help="AniList id"),
) -> None:
    """📺 List the merged sub/dub episodes of a work."""
    records = run_service(lambda service: service.get_episodes(anilist_id), f"Listing episodes of AniList {anilist_id}")

    if get_options().json_output:
        print_json([record.model_dump(mode="json", by_alias=True) for record in records])
        return

    console = get_console()
    if not records:
        console.print("[yellow]No episodes found[/yellow]")
        return
    console.print(UIComponents().create_episodes_table(records))


def watch(
    anilist_id: int = typer.Argument(..., help="AniList id"),
    episode: int = typer.Argument(..., help="Episode number"),
) -> None:
    """▶️  Resolve the playable streams of one episode."""
    record = run_service(
        lambda service: service.watch(anilist_id, episode),
        f"Resolving episode {episode} of AniList {anilist_id}",
    )

    if get_options().json_output:
        print_json(record.model_dump(mode="json", by_alias=True))
        return

    ui = UIComponents()
    console = get_console()
    series = str(record.series) if record.series else anilist_id
    console.print(f"[bold cyan]{series}[/bold cyan] - {record}")
    if record.source is not None:
        console.print(ui.create_stream_table(record.source))
        console.print(ui.create_stream_panel(record.source))


def extract(
    embed_url: str = typer.Argument(..., help="Player page URL carrying an 'id' query parameter"),
) -> None:
    """🎞️  Extract the stream of a player page directly."""
    descriptor = run_service(lambda service: service.pipeline.extract(embed_url), f"Extracting {embed_url}")

    if get_options().json_output:
        print_json(descriptor.model_dump(mode="json", by_alias=True))
        return

    ui = UIComponents()
    console = get_console()
    console.print(ui.create_stream_table(descriptor))
    console.print(ui.create_stream_panel(descriptor))


def register(app: typer.Typer) -> None:
    """Register the anime commands on the main app."""
    app.command(name="search")(search)
    app.command(name="info")(info)
    app.command(name="episodes")(episodes)
    app.command(name="watch")(watch)
    app.command(name="extract")(extract)


# Export commands
__all__ = ["register", "run_service", "search", "info", "episodes", "watch", "extract"]
