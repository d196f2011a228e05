#!/usr/bin/env python3
"""
Reading Queue CLI - spaced-repetition review of notes in an Obsidian vault.

Usage:
    reading-queue add "Articles/On Memory.md" --days 2
    reading-queue next
    reading-queue rate "Articles/On Memory.md" good
    reading-queue priority "Articles/On Memory.md" high
    reading-queue stats
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .core.config import Settings, get_settings
from .domain.errors import DomainError
from .domain.models import Rating, parse_priority, parse_rating
from .services.queue_manager import QueueManager, create_queue_manager
from .utils.logging import setup_logging

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2
EXIT_ERROR = 3

console = Console()


async def cmd_add(manager: QueueManager, args: argparse.Namespace) -> int:
    if not await manager.add_to_queue(args.path, days_until_due=args.days):
        console.print(f"[yellow]Already in queue:[/yellow] {args.path}")
        return EXIT_OK

    console.print(f"[green]Added[/green] {args.path}")
    return EXIT_OK


async def cmd_next(manager: QueueManager, args: argparse.Namespace) -> int:
    path = await manager.get_next_note()
    if path is None:
        console.print("[green]Nothing due. Queue is clear.[/green]")
        return EXIT_OK

    console.print(path)
    entry = await manager.get_entry(path)
    if entry is not None:
        _print_preview(manager.preview_intervals(entry.memory_state))
    return EXIT_OK


async def cmd_rate(manager: QueueManager, args: argparse.Namespace) -> int:
    rating = parse_rating(args.rating)
    due = await manager.schedule_next(args.path, rating)
    if due is None:
        console.print(f"[red]Not in queue:[/red] {args.path}")
        return EXIT_NOT_FOUND

    console.print(
        f"{rating.name.title()} - next review {due.astimezone():%Y-%m-%d %H:%M}"
    )
    return EXIT_OK


async def cmd_forget(manager: QueueManager, args: argparse.Namespace) -> int:
    if not await manager.forget_card(args.path):
        console.print(f"[red]Not in queue:[/red] {args.path}")
        return EXIT_NOT_FOUND

    console.print(f"Reset {args.path} to a new card")
    return EXIT_OK


async def cmd_priority(manager: QueueManager, args: argparse.Namespace) -> int:
    priority = parse_priority(args.level)
    if not await manager.update_priority(args.path, priority):
        console.print(f"[red]Not in queue:[/red] {args.path}")
        return EXIT_NOT_FOUND

    console.print(f"Priority of {args.path} set to {priority.name.title()}")
    return EXIT_OK


async def cmd_stats(manager: QueueManager, args: argparse.Namespace) -> int:
    stats = await manager.get_queue_stats(allow_cache=True)
    due_today = await manager.get_due_today_count(allow_cache=True)

    console.print(f"Due now: {stats.due}")
    console.print(f"Due today: {due_today}")
    console.print(f"Total in queue: {stats.total}")
    return EXIT_OK


async def cmd_due(manager: QueueManager, args: argparse.Namespace) -> int:
    batch = await manager.get_review_batch(limit=args.limit)
    if not batch:
        console.print("[green]Nothing due.[/green]")
        return EXIT_OK

    table = Table(title="Due for review", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Note")
    table.add_column("Priority")
    table.add_column("Due")

    for position, entry in enumerate(batch, start=1):
        table.add_row(
            str(position),
            entry.path,
            entry.priority.name.title(),
            f"{entry.memory_state.due.astimezone():%Y-%m-%d %H:%M}",
        )

    console.print(table)
    return EXIT_OK


async def cmd_show(manager: QueueManager, args: argparse.Namespace) -> int:
    entry = await manager.get_entry(args.path, allow_cache=False)
    if entry is None:
        console.print(f"[red]Not in queue:[/red] {args.path}")
        return EXIT_NOT_FOUND

    stats = manager.get_card_stats(entry.memory_state)

    table = Table(title=entry.path, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("State", stats.state.name.title())
    table.add_row("Priority", entry.priority.name.title())
    table.add_row("Due", f"{entry.memory_state.due.astimezone():%Y-%m-%d %H:%M}")
    table.add_row("Stability", f"{stats.stability} days")
    table.add_row("Difficulty", str(stats.difficulty))
    table.add_row("Reviews", str(stats.reps))
    table.add_row("Lapses", str(stats.lapses))
    console.print(table)

    _print_preview(manager.preview_intervals(entry.memory_state))
    return EXIT_OK


def _print_preview(previews) -> None:
    parts = [f"{rating.name.title()}: {previews[rating]}" for rating in Rating]
    console.print("  ".join(parts), style="dim")


COMMANDS = {
    "add": cmd_add,
    "next": cmd_next,
    "rate": cmd_rate,
    "forget": cmd_forget,
    "priority": cmd_priority,
    "stats": cmd_stats,
    "due": cmd_due,
    "show": cmd_show,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reading-queue", description="Incremental reading queue for a notes vault"
    )
    parser.add_argument("--vault", help="Vault directory (overrides settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Add a note to the queue")
    add_parser.add_argument("path", help="Note path relative to the vault")
    add_parser.add_argument(
        "--days", type=int, default=0, help="Days until first review (default: now)"
    )

    subparsers.add_parser("next", help="Show the note to read next")

    rate_parser = subparsers.add_parser("rate", help="Rate a note you just read")
    rate_parser.add_argument("path")
    rate_parser.add_argument("rating", help="again, hard, good, easy (or 1-4)")

    forget_parser = subparsers.add_parser("forget", help="Reset a note to a new card")
    forget_parser.add_argument("path")

    priority_parser = subparsers.add_parser("priority", help="Set a note's priority")
    priority_parser.add_argument("path")
    priority_parser.add_argument("level", help="high, normal, low (or 1-3)")

    subparsers.add_parser("stats", help="Show queue counters")

    due_parser = subparsers.add_parser("due", help="List due notes in reading order")
    due_parser.add_argument("--limit", type=int, default=None)

    show_parser = subparsers.add_parser("show", help="Show card details for a note")
    show_parser.add_argument("path")

    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    manager = create_queue_manager(settings)
    return await COMMANDS[args.command](manager, args)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.vault:
        settings = settings.model_copy(update={"vault_path": args.vault})

    setup_logging(settings.log_level, settings.log_to_file, settings.log_dir)

    try:
        return asyncio.run(run(args, settings))
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return EXIT_USAGE
    except DomainError as e:
        console.print(f"[red]Error:[/red] {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
