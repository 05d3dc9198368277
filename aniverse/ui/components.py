"""
UI Components - Rich tables and panels for Aniverse results.
"""

from typing import List

from rich.panel import Panel
from rich.table import Table

from aniverse.core.models import AnimeInfo, CatalogEntry, EpisodeRecord, StreamDescriptor
from aniverse.core.utils import truncate_text
from aniverse.ui.console import Palette


def _format_seconds(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


class UIComponents:
    """Builds the renderables printed by the CLI commands."""

    def create_catalog_table(self, entries: List[CatalogEntry], title: str = "🔍 Search Results") -> Table:
        """
        Create a table displaying catalog entries.

        Args:
            entries: Entries to list

        Returns:
            Formatted table
        """
        table = Table(
            title=title,
            show_header=True,
            header_style=f"bold {Palette.secondary}",
            border_style=Palette.border,
            expand=True
        )

        table.add_column("ID", style="dim", width=8)
        table.add_column("Title", style=Palette.primary, min_width=30)
        table.add_column("Format", width=9)
        table.add_column("Year", width=6)
        table.add_column("Episodes", width=9)
        table.add_column("Rating", style=Palette.accent, width=7)

        for entry in entries:
            table.add_row(
                entry.id,
                entry.display_title,
                entry.format or "?",
                str(entry.year) if entry.year else "?",
                str(entry.total_episodes) if entry.total_episodes else "?",
                f"{entry.rating:.1f}" if entry.rating is not None else "-",
            )

        return table

    def create_episodes_table(self, episodes: List[EpisodeRecord]) -> Table:
        """Create a table displaying a canonical episode list."""
        table = Table(
            title="📺 Episodes",
            show_header=True,
            header_style=f"bold {Palette.secondary}",
            border_style=Palette.border,
            expand=True
        )

        table.add_column("#", style="dim", width=5)
        table.add_column("Title", style=Palette.primary, min_width=25)
        table.add_column("Dub", width=5)
        table.add_column("Filler", width=7)

        for episode in episodes:
            table.add_row(
                str(episode.number),
                episode.title or "[dim]Untitled[/dim]",
                "✓" if episode.has_dub else "",
                "✓" if episode.is_filler else "",
            )

        return table

    def create_stream_table(self, descriptor: StreamDescriptor) -> Table:
        """Create a table listing the quality variants of a stream."""
        table = Table(
            title="🎞️  Available Qualities",
            show_header=True,
            header_style=f"bold {Palette.secondary}",
            border_style=Palette.border,
            expand=True
        )

        table.add_column("Quality", style=Palette.accent, width=10)
        table.add_column("Resolution", width=11)
        table.add_column("Bandwidth", width=11)
        table.add_column("URL", overflow="fold")

        for variant in descriptor.sources:
            url = variant.url if not variant.dub_url else f"{variant.url}\n[dim]dub:[/dim] {variant.dub_url}"
            table.add_row(
                variant.name,
                variant.resolution or "?",
                f"{variant.bandwidth // 1000} kbps",
                url,
            )

        return table

    def create_stream_panel(self, descriptor: StreamDescriptor) -> Panel:
        """Summarize the tracks and timing of a stream."""
        lines = [
            f"[dim]HLS:[/dim] {'yes' if descriptor.is_m3u8 else 'no'}",
            f"[dim]Intro:[/dim] {_format_seconds(descriptor.intro.start)} - {_format_seconds(descriptor.intro.end)}",
            f"[dim]Outro:[/dim] {_format_seconds(descriptor.outro.start)} - {_format_seconds(descriptor.outro.end)}",
        ]
        for subtitle in descriptor.subtitles:
            lines.append(f"[dim]Subtitle:[/dim] {subtitle}")
        for audio in descriptor.audio:
            lines.append(f"[dim]Audio:[/dim] {audio}")
        if descriptor.thumbnail:
            lines.append(f"[dim]Thumbnails ({descriptor.thumbnail_type}):[/dim] {descriptor.thumbnail}")
        for name, value in descriptor.headers.items():
            lines.append(f"[dim]Header {name}:[/dim] {value}")

        return Panel("\n".join(lines), title="Stream", border_style=Palette.border, padding=(1, 2))

    def create_info_panel(self, info: AnimeInfo) -> Panel:
        """Create a panel describing one work."""
        title = info.title
        lines = [f"[{Palette.primary}]{info.display_title}[/{Palette.primary}]"]
        if title.english and title.english != info.display_title:
            lines.append(f"[dim]English:[/dim] {title.english}")
        if title.native:
            lines.append(f"[dim]Native:[/dim] {title.native}")

        details = [
            ("Format", info.format),
            ("Status", info.status),
            ("Season", f"{info.season or ''} {info.year or ''}".strip() or None),
            ("Episodes", info.total_episodes),
            ("Rating", f"{info.rating:.1f}" if info.rating is not None else None),
            ("Genres", ", ".join(info.genres) or None),
            ("MAL", info.id_mal),
        ]
        for label, value in details:
            if value:
                lines.append(f"[dim]{label}:[/dim] {value}")

        if info.description:
            lines.append("")
            lines.append(truncate_text(info.description, 600))

        return Panel("\n".join(lines), title=f"AniList {info.id}", border_style=Palette.border, padding=(1, 2))


# Export UI components
__all__ = ["UIComponents"]
