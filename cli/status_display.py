"""Status display functionality for CLI"""

from typing import Any, Dict, Optional

from rich.table import Table

from playlist_ai import AssemblyResult, PlaylistPlan
from spotify_api import DashboardOverview, PlaybackState


def _format_duration(ms: Optional[int]) -> str:
    if not ms:
        return "-"
    minutes, seconds = divmod(ms // 1000, 60)
    return f"{minutes}:{seconds:02d}"


def show_session_status(status: Dict[str, Any], console):
    """
    Display session state and token details

    Args:
        status: SessionOrchestrator.status() output
        console: Rich console for output
    """
    token = status["token"]

    table = Table(title="Session Status")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    if status["is_authenticated"]:
        table.add_row("State", f"[green]{status['state']}[/green]")
    else:
        table.add_row("State", f"[yellow]{status['state']}[/yellow]")

    profile = status.get("profile")
    if profile:
        table.add_row("User", f"{profile['display_name'] or profile['id']} [dim]({profile['id']})[/dim]")

    table.add_row("Has Tokens", "Yes" if token["has_tokens"] else "No")
    if token["expires_at"]:
        table.add_row("Expires At", token["expires_at"])
        table.add_row("Time Until Expiry", token["time_until_expiry"])
        table.add_row("Refresh Token", "Yes" if token["has_refresh_token"] else "No")

    if status.get("error"):
        table.add_row("Last Error", f"[red]{status['error']}[/red]")

    console.print(table)


def show_overview(overview: DashboardOverview, console):
    """Display top tracks, genres and listening patterns"""
    name = overview.profile.display_name or overview.profile.id
    console.print(f"\n[bold cyan]Listening overview for {name}[/bold cyan]\n")

    tracks = Table(title="Top Tracks")
    tracks.add_column("#", justify="right", style="dim")
    tracks.add_column("Track")
    tracks.add_column("Artists", style="cyan")
    tracks.add_column("Length", justify="right")
    for index, track in enumerate(overview.top_tracks, start=1):
        artists = ", ".join(artist.name for artist in track.artists)
        tracks.add_row(str(index), track.name, artists, _format_duration(track.duration_ms))
    console.print(tracks)

    genres = Table(title="Top Genres")
    genres.add_column("Genre", style="cyan")
    genres.add_column("Artists", justify="right")
    genres.add_column("Examples", style="dim")
    for stat in overview.genre_stats:
        genres.add_row(stat.genre, str(stat.count), ", ".join(stat.artists))
    console.print(genres)

    patterns = overview.recent_patterns
    hours = ", ".join(f"{h.hour:02d}:00 ({h.count})" for h in patterns.top_hours if h.count)
    console.print(f"Busiest hours: {hours or '-'}")
    console.print(f"Most played artist lately: {patterns.top_artist or '-'}")


def show_playback(state: Optional[PlaybackState], console):
    if state is None or state.item is None:
        console.print("[dim]Nothing is playing right now[/dim]")
        return
    artists = ", ".join(artist.name for artist in state.item.artists)
    icon = "▶" if state.is_playing else "⏸"
    console.print(f"{icon} [bold]{state.item.name}[/bold] - {artists}")
    device = state.device.name if state.device else "unknown device"
    console.print(f"[dim]{device} | shuffle {'on' if state.shuffle_state else 'off'} | repeat {state.repeat_state}[/dim]")


def show_plan(plan: PlaylistPlan, console):
    console.print(f"\n[bold cyan]{plan.name}[/bold cyan]")
    if plan.description:
        console.print(f"[dim]{plan.description}[/dim]")
    for index, query in enumerate(plan.queries, start=1):
        console.print(f"  {index:>2}. {query}")


def show_assembly_result(result: AssemblyResult, console):
    console.print(f"\n[bold green]✓ Playlist created with {result.track_count} songs[/bold green]")
    if result.playlist_url:
        console.print(f"[cyan]{result.playlist_url}[/cyan]")
    if result.unmatched_queries:
        console.print(f"[yellow]No match for {len(result.unmatched_queries)} queries:[/yellow]")
        for query in result.unmatched_queries:
            console.print(f"  [dim]- {query}[/dim]")
