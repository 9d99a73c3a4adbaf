"""CLI entry point and argument parsing"""

import sys
import argparse
from rich.console import Console

from errors import SpotistatsError
from cli.cli_app import SpotistatsCLI
from cli.debug_setup import setup_logging


console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Spotistats - Spotify stats and AI playlists")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("status", help="Show session and token status")

    login = subparsers.add_parser("login", help="Connect your Spotify account (PKCE)")
    login.add_argument("--force", action="store_true", help="Log out first and re-authenticate")

    subparsers.add_parser("logout", help="Remove stored credentials")

    overview = subparsers.add_parser("overview", help="Top tracks, genres and listening patterns")
    overview.add_argument(
        "--time-range",
        choices=["short_term", "medium_term", "long_term"],
        default="medium_term",
    )

    subparsers.add_parser("playlists", help="List your playlists")

    player = subparsers.add_parser("player", help="Show or control playback")
    player.add_argument(
        "action",
        nargs="?",
        choices=["pause", "play", "next", "previous", "shuffle", "repeat"],
    )
    player.add_argument("value", nargs="?", help="on/off for shuffle, off/track/context for repeat")

    plan = subparsers.add_parser("plan", help="Generate a playlist plan without saving it")
    plan.add_argument("prompt")

    generate = subparsers.add_parser("generate", help="Generate a playlist with AI and save it")
    generate.add_argument("prompt")
    generate.add_argument("--public", action="store_true", help="Make the playlist public")

    serve = subparsers.add_parser("serve", help="Run the local dashboard service")
    serve.add_argument("--bind", "-b", default=None, help="Override bind address (default: from config)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Override port (default: from config)")

    return parser


def main(argv=None):
    """Entry point for the CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.debug)

    if not args.command:
        parser.print_help()
        return 0

    try:
        cli = SpotistatsCLI(console=console, debug=args.debug)
        if args.command == "status":
            cli.display_header()
            cli.status()
        elif args.command == "login":
            if not cli.login(force=args.force):
                return 1
        elif args.command == "logout":
            cli.logout()
        elif args.command == "overview":
            cli.overview(time_range=args.time_range)
        elif args.command == "playlists":
            cli.playlists()
        elif args.command == "player":
            cli.player(args.action, args.value)
        elif args.command == "plan":
            cli.plan(args.prompt)
        elif args.command == "generate":
            cli.generate(args.prompt, public=args.public)
        elif args.command == "serve":
            cli.serve(bind_address=args.bind, port=args.port)
        return 0

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except SpotistatsError as e:
        console.print(f"[red]ERROR:[/red] {e}")
        return 1
    except Exception as e:
        console.print(f"\n[red]Fatal error:[/red] {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
