"""Command-line entry point: run the API or inspect slots and interviews."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from interview_scheduler.api.deps import build_services
from interview_scheduler.config import load_config
from interview_scheduler.errors import ValidationError
from interview_scheduler.scheduler import is_upcoming
from interview_scheduler.schemas import InterviewStatus

custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
})

console = Console(theme=custom_theme)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="interview-scheduler")
    parser.add_argument("--env-file", default=None, help="path to a .env file")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    slots = sub.add_parser("slots", help="show the slot grid for a day")
    slots.add_argument("--date", required=True, type=date.fromisoformat)
    slots.add_argument("--duration", type=int, default=None)
    slots.add_argument("--user", default="", help="staff user whose calendar to check")

    interviews = sub.add_parser("interviews", help="list interviews")
    interviews.add_argument("--status", choices=[s.value for s in InterviewStatus], default=None)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the interview-scheduler CLI."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = load_config(args.env_file)

    if args.command == "serve":
        import uvicorn

        from interview_scheduler.api.app import create_app

        uvicorn.run(create_app(), host=args.host, port=args.port)
        return

    services = build_services(config)
    try:
        if args.command == "slots":
            _show_slots(services, args)
        elif args.command == "interviews":
            _show_interviews(services, args)
    finally:
        services.db.close()


def _show_slots(services, args: argparse.Namespace) -> None:
    try:
        options = asyncio.run(services.scheduler.slot_options(args.user, args.date, args.duration))
    except ValidationError as e:
        console.print(f"[error]{e}[/error]")
        sys.exit(1)

    table = Table(title=f"{args.date.isoformat()} ({options.duration_minutes} min, {services.config.timezone})")
    table.add_column("Time")
    table.add_column("Status")
    for slot in options.slots:
        marker = "[error]Busy[/error]" if slot.busy else "[success]Available[/success]"
        if slot.time == options.default_time:
            marker += "  [info]<- default[/info]"
        table.add_row(slot.time, marker)
    console.print(table)

    if not options.connected:
        console.print("[warning]No calendar connected; showing every slot as available.[/warning]")
    elif options.degraded:
        console.print("[warning]Calendar lookup failed; conflicts could not be checked.[/warning]")
    if not options.bookable:
        console.print("[warning]This date is in the past or on a weekend.[/warning]")
    if options.default_time is None:
        console.print("[warning]No free slot on this day.[/warning]")


def _show_interviews(services, args: argparse.Namespace) -> None:
    status = InterviewStatus(args.status) if args.status else None
    tz = services.config.tzinfo
    table = Table(title="Interviews")
    for col in ("ID", "Application", "When", "Duration", "Type", "Status", "Meeting"):
        table.add_column(col)
    for i in services.db.list_interviews(status=status):
        when = i.scheduled_at.astimezone(tz).strftime("%Y-%m-%d %H:%M")
        state = i.status.value
        if i.status is InterviewStatus.SCHEDULED and not is_upcoming(i):
            state += " (past)"
        table.add_row(
            i.id, i.application_id, when, f"{i.duration_minutes} min",
            i.interview_type.value, state, i.meeting_url or "-",
        )
    console.print(table)


if __name__ == "__main__":
    main()
