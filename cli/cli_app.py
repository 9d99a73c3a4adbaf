"""Main CLI application class for Spotistats"""

import asyncio
import webbrowser
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from errors import NotAuthenticatedError
from playlist_ai import PlanGenerator, PlaylistAssembler, ProgressEvent, generate_and_assemble
from spotify_api import load_overview
from spotify_oauth import SessionOrchestrator, SessionState
from web import DashboardServer
from cli.status_display import (
    show_assembly_result,
    show_overview,
    show_plan,
    show_playback,
    show_session_status,
)


class SpotistatsCLI:
    """Command-line front end over the same session and pipeline as the web service"""

    def __init__(
        self,
        session: Optional[SessionOrchestrator] = None,
        generator: Optional[PlanGenerator] = None,
        console: Optional[Console] = None,
        debug: bool = False,
    ):
        self.session = session or SessionOrchestrator()
        self.generator = generator or PlanGenerator()
        self.console = console or Console()
        self.debug = debug

        # Create event loop
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)

    def run_async(self, coro):
        return self.loop.run_until_complete(coro)

    def display_header(self):
        """Display application header"""
        self.console.print(Panel.fit(
            "[bold cyan]Spotistats[/bold cyan]\n"
            "[dim]Spotify listening stats and AI playlists[/dim]",
            border_style="cyan"
        ))

    def bootstrap(self, current_url: Optional[str] = None) -> SessionState:
        """Adopt, refresh or exchange credentials, reporting any error"""
        state = self.run_async(self.session.initialize(current_url))
        if self.session.last_error:
            self.console.print(f"[red]✗ {self.session.last_error}[/red]")
        return state

    def require_session(self):
        if self.bootstrap() is not SessionState.READY:
            raise NotAuthenticatedError("Not logged in. Run 'spotistats login' first.")

    # Commands

    def status(self):
        self.bootstrap()
        show_session_status(self.session.status(), self.console)

    def login(self, force: bool = False) -> bool:
        """Run the PKCE flow: open the browser, then take the redirect URL back"""
        self.bootstrap()
        if self.session.state is SessionState.READY and not force:
            self.console.print("[green]✓ Already logged in[/green] (use --force to re-authenticate)")
            return True

        url = self.session.authorize(force=force)
        self.console.print("\n[bold]Opening browser to:[/bold]")
        self.console.print(f"[dim]{url}[/dim]\n")
        if not webbrowser.open(url):
            self.console.print("[yellow]⚠ Could not open browser automatically[/yellow]")
            self.console.print("Please open the URL above in your browser.")

        self.console.print(
            "After approving access, Spotify redirects to "
            f"[cyan]{self.session.redirect_uri}[/cyan]."
        )
        redirect_url = Prompt.ask("Paste the full URL you were redirected to")

        state = self.bootstrap(redirect_url.strip())
        if state is SessionState.READY:
            profile = self.session.profile
            name = (profile.display_name or profile.id) if profile else "unknown user"
            self.console.print(f"\n[bold green]✓ Logged in as {name}[/bold green]")
            return True
        self.console.print("[red]✗ Login failed[/red]")
        return False

    def logout(self):
        self.session.logout()
        self.console.print("[green]✓ Logged out, stored credentials removed[/green]")

    def overview(self, time_range: str = "medium_term"):
        self.require_session()
        with self.console.status("Loading your listening data..."):
            result = self.run_async(load_overview(self.session.client, time_range=time_range))
        show_overview(result, self.console)

    def playlists(self):
        self.require_session()
        items = self.run_async(self.session.client.get_user_playlists())
        table = Table(title="Your Playlists")
        table.add_column("Name", style="cyan")
        table.add_column("Tracks", justify="right")
        table.add_column("Public")
        for playlist in items:
            total = playlist.tracks.total if playlist.tracks else 0
            table.add_row(playlist.name, str(total), "yes" if playlist.public else "no")
        self.console.print(table)

    def player(self, action: Optional[str] = None, value: Optional[str] = None):
        self.require_session()
        client = self.session.client
        if action == "pause":
            self.run_async(client.pause_playback())
        elif action == "play":
            self.run_async(client.resume_playback())
        elif action == "next":
            self.run_async(client.skip_to_next())
        elif action == "previous":
            self.run_async(client.skip_to_previous())
        elif action == "shuffle":
            self.run_async(client.set_shuffle((value or "on").lower() in ("on", "true", "1")))
        elif action == "repeat":
            self.run_async(client.set_repeat_mode(value or "off"))
        show_playback(self.run_async(client.get_playback_state()), self.console)

    def plan(self, prompt: str):
        with self.console.status("Generating playlist plan..."):
            plan = self.run_async(self.generator.generate(prompt))
        show_plan(plan, self.console)

    def generate(self, prompt: str, public: bool = False):
        self.require_session()
        profile = self.session.profile or self.run_async(self.session.load_profile())
        if profile is None:
            raise NotAuthenticatedError("Profile unavailable; log in again")

        with self.console.status("Generating playlist plan...") as spinner:
            def on_progress(event: ProgressEvent):
                spinner.update(event.message)

            assembler = PlaylistAssembler(self.session.client, on_progress=on_progress)
            plan, result = self.run_async(
                generate_and_assemble(self.generator, assembler, profile.id, prompt, public=public)
            )
        show_plan(plan, self.console)
        show_assembly_result(result, self.console)

    def serve(self, bind_address: Optional[str] = None, port: Optional[int] = None):
        server = DashboardServer(bind_address=bind_address, port=port)
        self.console.print(
            f"[bold green]✓ Dashboard running on http://{server.bind_address}:{server.port}[/bold green]"
        )
        server.run()
