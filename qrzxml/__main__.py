"""
QRZ.com XML lookups from the command line

    python -m qrzxml callsign AA7BQ W1AW
    python -m qrzxml dxcc 291
    python -m qrzxml bio AA7BQ --persist
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .config import load_settings
from .core.exceptions import QrzError
from .core.types import ApiVersion, CallsignInfo, DxccInfo
from .logging_setup import setup_logging
from .providers.qrz.provider import QrzXmlClient
from .storage.json_file import JsonFileSessionStore

logger = logging.getLogger(__name__)

console = Console()


def parse_args(argv: list[str] | None = None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="qrzxml", description="QRZ.com XML data lookups"
    )
    parser.add_argument("--config", default="config.json", help="Config file path")
    parser.add_argument(
        "--api-version", help='"current" (default), "legacy" or a version like 1.34'
    )
    parser.add_argument(
        "--persist",
        action="store_true",
        help="Reuse and save the session key in the cache file",
    )
    parser.add_argument("--log-file", type=Path, help="Write a debug log here")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")

    subparsers = parser.add_subparsers(dest="command", required=True)

    call_parser = subparsers.add_parser("callsign", help="Look up callsigns")
    call_parser.add_argument("callsigns", nargs="+", help="Callsigns to look up")
    call_parser.add_argument(
        "--concurrency", type=int, default=5, help="Parallel lookups (default: 5)"
    )

    dxcc_parser = subparsers.add_parser("dxcc", help="Look up a DXCC entity")
    dxcc_parser.add_argument("entity", help="Entity number or callsign")

    bio_parser = subparsers.add_parser("bio", help="Fetch biography HTML")
    bio_parser.add_argument("callsign", help="Callsign")

    subparsers.add_parser("session", help="Log in and show session details")

    return parser.parse_args(argv)


def render_callsign(info: CallsignInfo) -> Table:
    table = Table(title=info.call)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Name", info.full_name() or "-")
    if info.nickname:
        table.add_row("Nickname", info.nickname)
    for label, value in (
        ("Address", info.addr1),
        ("City", info.addr2),
        ("State", info.state),
        ("Country", info.country),
        ("Grid", info.grid),
        ("Class", info.license_class),
        ("DXCC", info.dxcc),
        ("CQ / ITU zone", f"{info.cqzone} / {info.ituzone}" if info.cqzone else None),
        ("Email", info.email),
    ):
        if value is not None:
            table.add_row(label, str(value))

    coords = info.coordinates()
    if coords:
        table.add_row("Location", f"{coords[0]:.4f}, {coords[1]:.4f}")
    qsl = {
        "eQSL": info.accepts_eqsl(),
        "Paper": info.returns_paper_qsl(),
        "LoTW": info.accepts_lotw(),
    }
    accepted = [name for name, ok in qsl.items() if ok]
    if accepted:
        table.add_row("QSL", ", ".join(accepted))
    return table


def render_dxcc(info: DxccInfo) -> Table:
    table = Table(title=f"DXCC {info.dxcc}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="magenta")

    for name, value in asdict(info).items():
        if value is not None:
            table.add_row(name, str(value))
    hours = info.timezone_hours()
    if hours is not None:
        table.add_row("UTC offset (h)", f"{hours:+.2f}")
    return table


def render_session(client: QrzXmlClient) -> Table:
    table = Table(title="Session")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")

    info = client.session_info()
    lookups, expires = info if info else (None, None)
    table.add_row("User", client.username)
    table.add_row("Endpoint", client.url)
    table.add_row("Authenticated", str(client.is_authenticated()))
    table.add_row("Lookups today", str(lookups) if lookups is not None else "-")
    table.add_row("Subscription expires", str(expires) if expires else "-")
    return table


async def run(args) -> int:
    """Execute the selected command, returns the exit code"""
    settings = load_settings(args.config)
    api_version = (
        ApiVersion.parse(args.api_version) if args.api_version else settings.api_version
    )
    client = QrzXmlClient(settings.username, settings.password, api_version, settings.config)

    store = JsonFileSessionStore(settings.session_cache) if args.persist else None
    if store and await client.restore_from(store):
        logger.info(f"Using cached session from {store.path}")

    exit_code = 0
    try:
        if args.command == "callsign":
            results = await client.lookup_callsigns(args.callsigns, args.concurrency)
            for callsign, result in results.items():
                if isinstance(result, QrzError):
                    console.print(f"[red]{callsign}: {result}[/red]")
                    exit_code = 1
                else:
                    console.print(render_callsign(result))

        elif args.command == "dxcc":
            if args.entity.isdigit():
                info = await client.lookup_dxcc_entity(int(args.entity))
            else:
                info = await client.lookup_dxcc_by_callsign(args.entity)
            console.print(render_dxcc(info))

        elif args.command == "bio":
            bio = await client.lookup_biography(args.callsign)
            if bio.is_empty():
                console.print(f"[yellow]{bio.callsign} has no biography[/yellow]")
            else:
                print(bio.html)

        elif args.command == "session":
            if not client.is_authenticated():
                await client.authenticate()
            console.print(render_session(client))

        else:
            raise ValueError(f"Unknown command: {args.command}")

    finally:
        if store:
            await client.persist_to(store)

    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    setup_logging(logging.INFO if args.verbose else logging.WARNING, args.log_file)

    try:
        return asyncio.run(run(args))
    except QrzError as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]{e}[/red]")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
