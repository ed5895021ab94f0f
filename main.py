#!/usr/bin/env python3
"""
Command Detection
=================

Command-line front end for the sentence command detector.

Usage:
    python main.py "turn on the wifi" --all          # Detect every catalog command
    python main.py "turn on the wifi" -a "1, 3"      # Only commands 1 and 3
    python main.py --interactive --all               # Type sentences, see codes
    python main.py --list                            # Show the catalog
"""

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from core.detector import CommandDetector, DetectionResult, DetectorConfig
from infra.logging import configure_logging, get_logger


console = Console()


def print_catalog(detector: CommandDetector) -> None:
    """Print every command in the catalog."""
    table = Table(title="Command catalog")
    table.add_column("Id", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Triggers", style="dim")

    for spec in detector.catalog.list_commands():
        table.add_row(str(spec.id), spec.name, ", ".join(sorted(spec.triggers)))

    console.print(table)


def print_result(result: DetectionResult, verbose: bool = False) -> None:
    """Print a detection result."""
    if verbose:
        console.print(f"[dim]Tokens: {result.tokens}[/dim]")

    if not result.success:
        console.print(f"[bold red]Error:[/bold red] {result.to_wire()}")
    elif result.codes:
        console.print(f"[bold green]Commands:[/bold green] {result.to_wire()}")
    else:
        console.print("[yellow]No commands detected[/yellow]")

    if verbose:
        console.print(f"[dim]Detection time: {result.elapsed_ms:.2f}ms[/dim]")


def run_interactive(detector: CommandDetector, allowed: str, dedupe: bool, verbose: bool) -> None:
    """Read sentences from the console until 'quit'."""
    console.print(Panel(
        f"Allowed commands: {allowed}\nType a sentence to detect commands. Type 'quit' to exit.",
        title="Command Detection",
        border_style="blue"
    ))

    while True:
        try:
            text = console.input("\n[bold cyan]>[/bold cyan] ").strip()
        except (KeyboardInterrupt, EOFError):
            break

        if not text:
            continue

        if text.lower() in ("quit", "exit", "q"):
            break

        if text.lower() == "list":
            print_catalog(detector)
            continue

        print_result(detector.detect(text, allowed, remove_repeated_cmds=dedupe), verbose)


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Detect catalog commands in a sentence"
    )
    parser.add_argument(
        "sentence",
        nargs="?",
        help="Sentence to analyze"
    )
    parser.add_argument(
        "--allowed", "-a",
        help='Allowed command ids separated by ", " (e.g. "1, 2, 5")'
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Allow every command in the catalog"
    )
    parser.add_argument(
        "--dedupe", "-d",
        action="store_true",
        help="Collapse immediately repeated commands"
    )
    parser.add_argument(
        "--interactive", "-i",
        action="store_true",
        help="Read sentences from the console"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the catalog and exit"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show tokens and timing"
    )
    parser.add_argument(
        "--config", "-c",
        default="config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides the config file)"
    )

    args = parser.parse_args()

    config = DetectorConfig.from_yaml(args.config)
    level = args.log_level or config.log_level
    configure_logging(level=getattr(logging, level, logging.INFO), log_dir=config.log_dir)
    logger = get_logger("main")

    try:
        detector = CommandDetector(config)

        if args.list:
            print_catalog(detector)
            return 0

        allowed = detector.all_ids() if args.all or not args.allowed else args.allowed
        dedupe = args.dedupe or config.remove_repeated

        if args.interactive:
            run_interactive(detector, allowed, dedupe, args.verbose)
            return 0

        if not args.sentence:
            parser.error("a sentence is required unless --interactive or --list is given")

        result = detector.detect(args.sentence, allowed, remove_repeated_cmds=dedupe)
        print_result(result, args.verbose)
        return 0 if result.success else 1

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except Exception as e:
        logger.exception("Fatal error")
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
