#!/usr/bin/env python3
"""
Storyteller CLI — Command-Line Interface for Story Beautification

Operator tooling around the beautification pipeline: batch-process
content-store exports, inspect how a single transcript is analyzed, or
look at the cleaned text on its own.

Commands:
    beautify  Beautify a JSON list of records; failed records pass through.
    analyze   Beautify one transcript text file and show the result.
    clean     Print the cleaned (or narrative) text of a transcript.

Global options (accepted by every command):
    --config PATH       Use this .env file instead of ./.env.
    --log-level LEVEL   Override STORYTELLER_LOG_LEVEL for this invocation.
    --rules PATH        Override STORYTELLER_RULES_FILE for this invocation.

Exit codes:
    0   Every record beautified (or action succeeded).
    1   At least one record was passed through unchanged.
    2   Fatal error (config failure, unreadable input).

Usage::

    python -m storyteller --help
    python -m storyteller beautify stories.json -o beautified.json
    python -m storyteller beautify - --json < stories.json
    python -m storyteller --rules rules.yaml beautify stories.json --timeout 5
    python -m storyteller analyze transcript.txt --title "Moving Home"
    python -m storyteller clean transcript.txt --narrative

Version: 0.1.0
"""

import asyncio
import json
import os
import sys
from typing import Any, Dict, Optional

import click
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from storyteller import __version__
from storyteller.cleaner import clean
from storyteller.config import (
    StorytellerConfig,
    build_beautifier,
    build_coordinator,
    get_config,
)
from storyteller.exceptions import StorytellerError
from storyteller.logger import configure_logging
from storyteller.models import BatchResult, BeautifiedStory, RawStoryInput, record_identifier
from storyteller.narrative import narrate

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _load_config(console: Console, **overrides: Any) -> StorytellerConfig:
    """Load the cached config, apply CLI overrides and set up logging.

    Exits with code 2 when the environment does not validate.
    """
    try:
        cfg = get_config()
    except Exception as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(2)

    updates = {k: v for k, v in overrides.items() if v is not None}
    if updates:
        cfg = cfg.model_copy(update=updates)

    configure_logging(cfg)
    return cfg


def _read_text(stream: Any, console: Console) -> str:
    """Read a text input; exits with code 2 when it cannot be read or decoded."""
    try:
        return stream.read()
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"[bold red]Cannot read input:[/bold red] {exc}")
        sys.exit(2)


def _batch_exit_code(result: BatchResult) -> int:
    """0 when every record was beautified; 1 otherwise."""
    return 0 if result.failed == 0 else 1


def _make_batch_table(records: list, result: BatchResult) -> Table:
    """Build a Rich Table with one row per input record."""
    table = Table(
        show_header=True,
        header_style="bold dim",
        box=box.SIMPLE,
        padding=(0, 1),
    )
    table.add_column("Record", style="bold", min_width=8)
    table.add_column("Status", min_width=10)
    table.add_column("Quality", justify="right")
    table.add_column("Read", justify="right")
    table.add_column("Themes")

    for index, (original, output) in enumerate(zip(records, result.records)):
        record_id = record_identifier(original, index)
        error = result.error_at(index)
        if error is not None:
            table.add_row(
                record_id,
                Text("✗ SKIPPED", style="bold red"),
                "—",
                "—",
                Text(error, style="dim"),
            )
            continue
        table.add_row(
            record_id,
            Text("✓ OK", style="bold green"),
            f"{output['quality_score']:.2f}",
            f"{output['estimated_reading_time']} min",
            ", ".join(output["themes"]) or "—",
        )
    return table


def _print_story(story: BeautifiedStory, console: Console) -> None:
    e = story.enhancement
    label = " [yellow](fallback)[/yellow]" if e.is_fallback else ""
    console.print(f"\n  [bold]{e.title}[/bold]{label}")
    console.print(f"  [dim]{e.summary}[/dim]\n")
    console.print(f"  Themes:    {', '.join(e.themes) or '—'}")
    console.print(f"  Emotions:  {', '.join(e.emotions) or '—'}")
    console.print(f"  Warnings:  {', '.join(e.content_warnings) or '—'}")
    console.print(
        f"  Reading:   {story.metrics.estimated_reading_time} min  "
        f"({story.metrics.word_count} words)"
    )
    console.print(f"  Quality:   {story.metrics.quality_score:.2f}")
    if e.key_quotes:
        console.print("\n  [bold dim]Key Quotes[/bold dim]")
        for quote in e.key_quotes:
            console.print(f"    “{quote}”")
    console.print()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=__version__, prog_name="storyteller")
@click.option(
    "--config",
    "config_path",
    default=None,
    metavar="PATH",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a custom .env file.  Overrides ./.env.",
)
@click.option(
    "--log-level",
    "log_level",
    default=None,
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    metavar="LEVEL",
    help="Override STORYTELLER_LOG_LEVEL for this invocation.",
)
@click.option(
    "--rules",
    "rules_path",
    default=None,
    metavar="PATH",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML keyword rules file.  Overrides STORYTELLER_RULES_FILE.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    log_level: Optional[str],
    rules_path: Optional[str],
) -> None:
    """Storyteller — turn raw transcripts into readable narratives.

    Configuration is read from STORYTELLER_* environment variables or a
    .env file.  Global options must come BEFORE the subcommand.

    \b
    Examples:
        storyteller beautify stories.json -o beautified.json
        storyteller --log-level DEBUG analyze transcript.txt
        storyteller --rules rules.yaml beautify stories.json --json
    """
    ctx.ensure_object(dict)

    # Apply overrides before any command runs so get_config() sees them.
    if config_path:
        os.environ["STORYTELLER_ENV_FILE"] = config_path
        get_config.cache_clear()

    if log_level:
        os.environ["STORYTELLER_LOG_LEVEL"] = log_level.upper()
        get_config.cache_clear()

    if rules_path:
        os.environ["STORYTELLER_RULES_FILE"] = rules_path
        get_config.cache_clear()


# ---------------------------------------------------------------------------
# beautify command
# ---------------------------------------------------------------------------

@cli.command("beautify")
@click.argument("input_file", metavar="INPUT", type=click.File("r", encoding="utf-8"))
@click.option(
    "--output",
    "-o",
    "output_path",
    default=None,
    metavar="PATH",
    type=click.Path(dir_okay=False, writable=True),
    help="Write the beautified records to this JSON file.",
)
@click.option(
    "--concurrency",
    default=None,
    type=click.IntRange(min=1),
    metavar="N",
    help="Records processed at once.  Overrides STORYTELLER_MAX_CONCURRENCY.",
)
@click.option(
    "--timeout",
    default=None,
    type=click.FloatRange(min=0, min_open=True),
    metavar="SECS",
    help="Per-record timeout.  Overrides STORYTELLER_RECORD_TIMEOUT_S.",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    default=False,
    help="Print the beautified records as JSON instead of the Rich table.",
)
def beautify_cmd(
    input_file: Any,
    output_path: Optional[str],
    concurrency: Optional[int],
    timeout: Optional[float],
    output_json: bool,
) -> None:
    """Beautify a JSON list of content-store records.

    INPUT is a JSON file (or ``-`` for stdin) holding a list of records
    with at least a ``content`` field.  Records that cannot be beautified
    are written back unchanged and reported; the exit code is 1 when any
    record was passed through.

    \b
    Examples:
        storyteller beautify stories.json -o beautified.json
        storyteller beautify - --json < stories.json
        storyteller beautify stories.json --concurrency 2 --timeout 5
    """
    console = Console(highlight=False)
    cfg = _load_config(
        console,
        max_concurrency=concurrency,
        record_timeout_s=timeout,
    )

    try:
        records = json.load(input_file)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        console.print(f"[bold red]Cannot read input:[/bold red] {exc}")
        sys.exit(2)
    if not isinstance(records, list):
        console.print("[bold red]Input must be a JSON list of records.[/bold red]")
        sys.exit(2)

    try:
        coordinator = build_coordinator(cfg)
    except StorytellerError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(2)

    result = asyncio.run(coordinator.run(records))

    if output_path:
        try:
            with open(output_path, "w", encoding="utf-8") as fh:
                json.dump(result.records, fh, indent=2, ensure_ascii=False)
        except OSError as exc:
            console.print(f"[bold red]Cannot write output:[/bold red] {exc}")
            sys.exit(2)

    if output_json:
        click.echo(json.dumps(result.records, indent=2, ensure_ascii=False))
        sys.exit(_batch_exit_code(result))

    console.print(_make_batch_table(records, result))
    console.print(f"  {result.summary()}")
    if output_path:
        console.print(f"  [dim]Written to {output_path}[/dim]")

    sys.exit(_batch_exit_code(result))


# ---------------------------------------------------------------------------
# analyze command
# ---------------------------------------------------------------------------

@cli.command("analyze")
@click.argument("transcript", metavar="FILE", type=click.File("r", encoding="utf-8"))
@click.option(
    "--title",
    default=None,
    metavar="TEXT",
    help="Title supplied with the story; skips title generation.",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    default=False,
    help="Output raw JSON instead of the formatted report.",
)
def analyze_cmd(transcript: Any, title: Optional[str], output_json: bool) -> None:
    """Beautify one raw transcript and show the derived metadata.

    \b
    Examples:
        storyteller analyze transcript.txt
        storyteller analyze transcript.txt --title "Moving Home" --json
    """
    console = Console(highlight=False)
    cfg = _load_config(console)

    try:
        beautifier = build_beautifier(cfg)
    except StorytellerError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(2)

    story = beautifier.beautify(
        RawStoryInput(raw_content=_read_text(transcript, console), title=title or None)
    )

    if output_json:
        data: Dict[str, Any] = story.to_dict()
        data["word_count"] = story.metrics.word_count
        data["is_fallback"] = story.enhancement.is_fallback
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    _print_story(story, console)


# ---------------------------------------------------------------------------
# clean command
# ---------------------------------------------------------------------------

@cli.command("clean")
@click.argument("transcript", metavar="FILE", type=click.File("r", encoding="utf-8"))
@click.option(
    "--narrative",
    is_flag=True,
    default=False,
    help="Also reflow into narrative paragraphs.",
)
def clean_cmd(transcript: Any, narrative: bool) -> None:
    """Print the cleaned text of a transcript.

    \b
    Examples:
        storyteller clean transcript.txt
        storyteller clean transcript.txt --narrative
    """
    text = clean(_read_text(transcript, Console(highlight=False)))
    if narrative:
        text = narrate(text)
    click.echo(text)
