"""
Review Engine CLI.

A Rich terminal interface over the scheduler, evaluator and planner.

Commands:
- review-engine evaluate  - Score a transcript against the expected text
- review-engine add       - Start tracking items
- review-engine review    - Record a graded review
- review-engine due       - List items due now
- review-engine plan      - Plan a time-boxed session
- review-engine stats     - Show collection statistics
- review-engine predict   - Predict when an item graduates
- review-engine export    - Write a JSON backup
- review-engine import    - Merge a JSON backup
- review-engine tone      - Check a tone identification answer

The CLI is the only layer that reads the wall clock.
"""
from __future__ import annotations

import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from review_engine.assessment import (
    PronunciationEvaluator,
    PronunciationResult,
    QualityPolicy,
    ScoreTier,
    check_tone,
)
from review_engine.config import get_settings
from review_engine.study import MasteryCalculator, SessionPlanner, SessionType

from .scheduler import SM2Scheduler
from .state_store import ReviewRecord, ReviewResponse, StateStore

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="review-engine",
    help="Pronunciation assessment and spaced-repetition review scheduling",
    no_args_is_help=True,
)
console = Console()


def _db_option():
    return typer.Option(None, "--db", help="SQLite state file (defaults to the configured path)")


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "dim": "dim",
    "tier": {
        ScoreTier.EXCELLENT: "green",
        ScoreTier.GOOD: "cyan",
        ScoreTier.FAIR: "yellow",
        ScoreTier.POOR: "red",
    },
}


def _now() -> datetime:
    return datetime.now(UTC)


def _store(db: Optional[Path]) -> StateStore:
    return StateStore(db_path=db or get_settings().db_path)


# =============================================================================
# Display Helpers
# =============================================================================

def display_result(result: PronunciationResult) -> None:
    """Display an evaluation result."""
    color = STYLES["tier"][result.score]
    content = (
        f"[{color}]{result.score.value.upper()}[/{color}]  {result.accuracy}%  "
        f"[dim](confidence {result.confidence:.2f})[/dim]\n\n"
        f"{result.feedback}\n\n"
        f"Heard:    {result.detected_text or '[dim]-[/dim]'}\n"
        f"Expected: {result.expected_text or '[dim]-[/dim]'}\n\n"
        f"Characters {result.details.character_accuracy:.0%}  |  "
        f"Tones {result.details.tone_accuracy:.0%}  |  "
        f"Fluency {result.details.fluency:.0%}"
    )
    if result.suggestions:
        content += "\n\n" + "\n".join(f"  - {s}" for s in result.suggestions)

    console.print(Panel(content, title="Pronunciation", border_style=color, padding=(1, 2)))


def display_records(records: list[ReviewRecord], title: str, now: datetime) -> None:
    """Display records as a table."""
    table = Table(title=title)
    table.add_column("Item")
    table.add_column("Level")
    table.add_column("Difficulty")
    table.add_column("EF", justify="right")
    table.add_column("Interval", justify="right")
    table.add_column("Due")

    for record in records:
        level = record.mastery_level
        overdue = record.days_overdue(now)
        due_str = record.due_date.strftime("%Y-%m-%d %H:%M")
        if overdue:
            due_str += f" [red](+{overdue}d)[/red]"
        table.add_row(
            record.item_id,
            f"[{level.color}]{level.display_name}[/{level.color}]",
            record.difficulty.display_name,
            f"{record.ease_factor:.2f}",
            f"{record.interval}d",
            due_str,
        )

    console.print(table)


# =============================================================================
# Commands
# =============================================================================

@app.command()
def evaluate(
    transcript: str = typer.Argument(..., help="Recognized or typed text"),
    expected: str = typer.Argument(..., help="Target text"),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Language tag, e.g. zh-CN"),
    timing: int = typer.Option(0, "--timing", "-t", help="Response time in ms"),
    item: Optional[str] = typer.Option(None, "--item", "-i", help="Record the result as a review of this item"),
    db: Optional[Path] = _db_option(),
) -> None:
    """Score a pronunciation attempt, optionally scheduling the item."""
    settings = get_settings()
    result = PronunciationEvaluator().evaluate(
        transcript,
        expected,
        language=language or settings.default_language,
        timing_ms=timing,
    )
    display_result(result)

    if item:
        response = QualityPolicy.from_settings(settings).to_review_response(result)
        record = _store(db).review(item, response, _now())
        console.print(
            f"[{STYLES['info']}]{item}[/]: quality {response.quality}, "
            f"next review in {record.interval}d"
        )


@app.command()
def add(
    item_ids: List[str] = typer.Argument(..., help="Item ids to start tracking"),
    db: Optional[Path] = _db_option(),
) -> None:
    """Start tracking items (due immediately)."""
    store = _store(db)
    now = _now()
    created = 0
    for item_id in item_ids:
        if store.get(item_id) is None:
            store.get_or_initialize(item_id, now)
            created += 1

    console.print(f"[green]Added {created} item(s)[/green], {len(item_ids) - created} already tracked")


@app.command()
def review(
    item_id: str = typer.Argument(..., help="Item that was reviewed"),
    quality: int = typer.Option(..., "--quality", "-q", help="SM-2 grade 0-5"),
    correct: bool = typer.Option(True, "--correct/--wrong", help="Whether the answer was correct"),
    response_time: int = typer.Option(0, "--response-time", "-r", help="Time to answer in ms"),
    db: Optional[Path] = _db_option(),
) -> None:
    """Record a graded review."""
    record = _store(db).review(
        item_id,
        ReviewResponse(quality=quality, response_time=response_time, was_correct=correct),
        _now(),
    )
    style = STYLES["correct"] if correct else STYLES["incorrect"]
    console.print(
        f"[{style}]{item_id}[/]: interval {record.interval}d, EF {record.ease_factor:.2f}, "
        f"streak {record.streak}, due {record.due_date:%Y-%m-%d}"
    )


@app.command()
def due(db: Optional[Path] = _db_option()) -> None:
    """List items due now, earliest first."""
    now = _now()
    records = SessionPlanner().due_items(_store(db).all(), now)
    if not records:
        console.print("[green]Nothing due for review![/green]")
        raise typer.Exit(0)
    display_records(records, f"Due now ({len(records)})", now)


@app.command()
def plan(
    minutes: Optional[float] = typer.Option(None, "--minutes", "-m", help="Time budget"),
    mode: Optional[SessionType] = typer.Option(None, "--mode", help="review, new_words or mixed"),
    db: Optional[Path] = _db_option(),
) -> None:
    """Plan a time-boxed study session."""
    settings = get_settings()
    session = SessionPlanner().plan(
        _store(db).all(),
        _now(),
        target_minutes=minutes if minutes is not None else settings.default_session_minutes,
        mode=mode or settings.default_session_mode,
    )

    if session.total_items == 0:
        console.print("[green]Nothing to study right now.[/green]")
        raise typer.Exit(0)

    console.print(f"\n[bold]Session ({session.session_type.value}): {session.total_items} items[/bold]")
    console.print(f"  Estimated time: ~{session.estimated_time} min\n")
    for index, item_id in enumerate(session.item_ids, 1):
        console.print(f"  {index:>2}. {item_id}")


@app.command()
def stats(db: Optional[Path] = _db_option()) -> None:
    """Show learning statistics and progress."""
    summary = MasteryCalculator().stats(_store(db).all(), _now())

    console.print("\n[bold cyan]Learning Statistics[/bold cyan]")
    console.print("=" * 40)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Items tracked", str(summary.total_words))
    table.add_row("Due now", str(summary.due_words))
    table.add_row("Mastered", str(summary.mastered_words))
    table.add_row("Accuracy", f"{summary.average_accuracy:.1f}%")
    table.add_row("Average ease", f"{summary.average_ease_factor:.2f}")
    for name, count in summary.mastery_distribution.items():
        table.add_row(f"  {name}", str(count))
    for name, count in summary.difficulty_distribution.items():
        table.add_row(f"  {name.replace('_', ' ')}", str(count))

    console.print(table)


@app.command()
def predict(
    item_id: str = typer.Argument(..., help="Tracked item"),
    db: Optional[Path] = _db_option(),
) -> None:
    """Predict when an item will be mastered with steady good reviews."""
    record = _store(db).get(item_id)
    if record is None:
        console.print(f"[red]Unknown item: {item_id}[/red]")
        raise typer.Exit(1)

    predicted = SM2Scheduler().predict_mastery_date(record, _now())
    console.print(f"{item_id}: graduates around [bold]{predicted:%Y-%m-%d}[/bold]")


@app.command("export")
def export_cmd(
    path: Path = typer.Argument(..., help="Destination JSON file"),
    db: Optional[Path] = _db_option(),
) -> None:
    """Write all review records to a JSON backup."""
    store = _store(db)
    payload = store.export_json(_now())
    try:
        path.write_text(payload, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Cannot write {path}: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Exported {len(store.all())} records to {path}[/green]")


@app.command("import")
def import_cmd(
    path: Path = typer.Argument(..., help="JSON backup to merge"),
    db: Optional[Path] = _db_option(),
) -> None:
    """Merge a JSON backup into the store (invalid records are skipped)."""
    try:
        payload = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Cannot read {path}: {e}[/red]")
        raise typer.Exit(1)

    count = _store(db).import_json(payload)
    console.print(f"[green]Imported {count} records from {path}[/green]")


@app.command()
def tone(
    pinyin: str = typer.Argument(..., help="Pinyin of the syllable, e.g. mǎ or ma3"),
    selected: int = typer.Argument(..., help="Tone you heard (1-4)"),
    response_time: int = typer.Option(0, "--response-time", "-r", help="Time to answer in ms"),
) -> None:
    """Check a tone identification answer."""
    result = check_tone(selected, pinyin, response_time)
    style = STYLES["correct"] if result.is_correct else STYLES["incorrect"]
    console.print(f"[{style}]{result.feedback}[/] [dim]({result.accuracy}%)[/dim]")
    if result.suggestion:
        console.print(f"[{STYLES['warning']}]{result.suggestion}[/]")


# =============================================================================
# Entry Point
# =============================================================================

def configure_logging(level: str) -> None:
    """Route loguru output to stderr at the given level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<level>{message}</level>",
    )


def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings().log_level)
    app()


if __name__ == "__main__":
    main()
