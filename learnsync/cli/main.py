"""
Typer CLI for learnsync.

Commands:
    learnsync content classes              - List classes
    learnsync content subjects CLASS       - List subjects of a class
    learnsync content chapters SUBJECT     - List chapters of a subject
    learnsync content lessons CHAPTER      - List lessons of a chapter
    learnsync content lesson LESSON        - Show a lesson
    learnsync content quiz LESSON          - Show a lesson's quiz
    learnsync content chapter CHAPTER      - Show combined chapter content
    learnsync progress complete UNIT       - Mark a unit complete and sync
    learnsync progress access UNIT         - Record that a unit was opened
    learnsync progress show                - List all progress records
    learnsync progress subject SUBJECT     - Subject completion percentage
    learnsync progress class CLASS         - Class completion summary
    learnsync progress reset               - Clear all progress
    learnsync progress xp AMOUNT           - Award XP and sync
    learnsync progress quiz-result QUIZ    - Submit a quiz score and sync
    learnsync progress game-result GAME    - Submit a game score and sync
    learnsync sync status                  - Show pending mutations
    learnsync sync now                     - Replay the queue
    learnsync sync watch                   - Replay whenever connectivity returns
    learnsync sync clear                   - Drop every pending mutation

Usage:
    learnsync --help
    learnsync --offline content chapters sci-6
    learnsync progress complete sci-6-ch1 --subject sci-6 --class class-6
"""

from __future__ import annotations

import asyncio
import json
import sys
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from learnsync.config import Settings, get_settings
from learnsync.content.models import ContentSource, ContentType
from learnsync.runtime import LearnSyncRuntime, build_runtime

T = TypeVar("T")

console = Console()

app = typer.Typer(
    help="learnsync CLI: offline-first content and progress sync",
    no_args_is_help=True,
)
content_app = typer.Typer(name="content", help="Resolve learning content", no_args_is_help=True)
progress_app = typer.Typer(name="progress", help="Local progress ledger", no_args_is_help=True)
sync_app = typer.Typer(name="sync", help="Sync queue operations", no_args_is_help=True)

app.add_typer(content_app, name="content")
app.add_typer(progress_app, name="progress")
app.add_typer(sync_app, name="sync")

SOURCE_STYLES = {
    ContentSource.REMOTE: "green",
    ContentSource.CACHE: "yellow",
    ContentSource.BUNDLED: "cyan",
    ContentSource.PLACEHOLDER: "red",
}


def configure_logging(level: str) -> None:
    """Route loguru output to stderr at the requested level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj["settings"]


def _run(ctx: typer.Context, action: Callable[[LearnSyncRuntime], Awaitable[T]]) -> T:
    """Build the runtime, run one async action, always close it."""

    async def runner() -> T:
        runtime = build_runtime(_settings(ctx))
        try:
            return await action(runtime)
        finally:
            await runtime.close()

    return asyncio.run(runner())


@app.callback()
def main(
    ctx: typer.Context,
    offline: bool = typer.Option(
        False, "--offline", help="Skip every remote call (force offline)"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Override the configured log level"
    ),
):
    """Offline-first content and progress sync for K-12 learners."""
    settings = get_settings()
    if offline:
        settings = settings.model_copy(update={"force_offline": True})
    configure_logging(log_level or settings.log_level)
    ctx.obj = {"settings": settings}


# ============================================================================
# CONTENT COMMANDS
# ============================================================================


def _show_content(ctx: typer.Context, content_type: ContentType, scope_id: str | None) -> None:
    resolved = _run(ctx, lambda rt: rt.resolver.resolve(content_type, scope_id))
    style = SOURCE_STYLES[resolved.source]
    console.print(f"[{style}]source: {resolved.source.value}[/{style}]")

    payload = resolved.payload
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        _print_items(payload)
    else:
        console.print_json(json.dumps(payload, default=str))


def _print_items(items: list[dict[str, Any]]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("ID")
    table.add_column("Name")
    for item in items:
        table.add_row(
            str(item.get("_id", "")),
            str(item.get("name") or item.get("title") or item.get("question", "")),
        )
    console.print(table)


@content_app.command("classes")
def content_classes(ctx: typer.Context):
    """List classes."""
    _show_content(ctx, ContentType.CLASSES, None)


@content_app.command("subjects")
def content_subjects(ctx: typer.Context, class_id: str = typer.Argument(..., help="Class id")):
    """List subjects of a class."""
    _show_content(ctx, ContentType.SUBJECTS, class_id)


@content_app.command("chapters")
def content_chapters(
    ctx: typer.Context, subject_id: str = typer.Argument(..., help="Subject id")
):
    """List chapters of a subject."""
    _show_content(ctx, ContentType.CHAPTERS, subject_id)


@content_app.command("lessons")
def content_lessons(
    ctx: typer.Context, chapter_id: str = typer.Argument(..., help="Chapter id")
):
    """List lessons (subchapters) of a chapter."""
    _show_content(ctx, ContentType.SUBCHAPTERS, chapter_id)


@content_app.command("lesson")
def content_lesson(ctx: typer.Context, lesson_id: str = typer.Argument(..., help="Lesson id")):
    """Show a single lesson."""
    _show_content(ctx, ContentType.SUBCHAPTER, lesson_id)


@content_app.command("quiz")
def content_quiz(ctx: typer.Context, lesson_id: str = typer.Argument(..., help="Lesson id")):
    """Show the quiz for a lesson."""
    _show_content(ctx, ContentType.QUIZ, lesson_id)


@content_app.command("chapter")
def content_chapter(
    ctx: typer.Context, chapter_id: str = typer.Argument(..., help="Chapter id")
):
    """Show combined chapter content."""
    _show_content(ctx, ContentType.CHAPTER_CONTENT, chapter_id)


# ============================================================================
# PROGRESS COMMANDS
# ============================================================================


@progress_app.command("complete")
def progress_complete(
    ctx: typer.Context,
    unit_id: str = typer.Argument(..., help="Chapter or lesson id"),
    subject_id: str = typer.Option(..., "--subject", "-s", help="Subject id"),
    class_id: str = typer.Option(..., "--class", "-c", help="Class id"),
):
    """Mark a unit complete; syncs now or queues for later."""
    outcome = _run(
        ctx, lambda rt: rt.coordinator.record_completion(unit_id, subject_id, class_id)
    )
    console.print(f"[green]✓[/green] {unit_id} completed ({outcome.value})")


@progress_app.command("access")
def progress_access(
    ctx: typer.Context,
    unit_id: str = typer.Argument(..., help="Chapter or lesson id"),
    subject_id: str = typer.Option(..., "--subject", "-s", help="Subject id"),
    class_id: str = typer.Option(..., "--class", "-c", help="Class id"),
):
    """Record that a unit was opened."""

    async def action(rt: LearnSyncRuntime):
        return rt.coordinator.record_access(unit_id, subject_id, class_id)

    record = _run(ctx, action)
    console.print(f"{record.unit_id} last accessed {record.last_accessed_at.isoformat()}")


@progress_app.command("xp")
def progress_xp(
    ctx: typer.Context,
    amount: int = typer.Argument(..., help="XP to award"),
    source: str = typer.Option("lesson", "--source", help="What earned the XP"),
):
    """Award XP; syncs now or queues for later."""
    outcome = _run(ctx, lambda rt: rt.coordinator.record_xp(amount, source))
    console.print(f"[green]✓[/green] +{amount} XP ({outcome.value})")


@progress_app.command("quiz-result")
def progress_quiz_result(
    ctx: typer.Context,
    quiz_id: str = typer.Argument(..., help="Quiz id"),
    score: int = typer.Option(..., "--score", help="Correct answers"),
    total: int = typer.Option(..., "--total", help="Number of questions"),
):
    """Submit a quiz result; syncs now or queues for later."""
    timestamp = int(time.time() * 1000)
    outcome = _run(
        ctx, lambda rt: rt.coordinator.record_quiz_result(quiz_id, score, total, timestamp)
    )
    console.print(f"[green]✓[/green] {quiz_id}: {score}/{total} ({outcome.value})")


@progress_app.command("game-result")
def progress_game_result(
    ctx: typer.Context,
    game_id: str = typer.Argument(..., help="Game id"),
    score: int = typer.Option(..., "--score", help="Points scored"),
    time_taken: int = typer.Option(..., "--time", help="Seconds played"),
    subject: Optional[str] = typer.Option(None, "--subject", "-s", help="Subject id"),
):
    """Submit a game result; syncs now or queues for later."""
    result: dict[str, Any] = {
        "gameId": game_id,
        "score": score,
        "timeTaken": time_taken,
        "timestamp": int(time.time() * 1000),
    }
    if subject:
        result["subject"] = subject
    outcome = _run(ctx, lambda rt: rt.coordinator.record_game_result(result))
    console.print(f"[green]✓[/green] {game_id}: {score} ({outcome.value})")


@progress_app.command("show")
def progress_show(ctx: typer.Context):
    """List every progress record."""

    async def action(rt: LearnSyncRuntime):
        return rt.ledger.all()

    records = _run(ctx, action)
    if not records:
        console.print("[dim]No progress recorded yet[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Unit")
    table.add_column("Subject")
    table.add_column("Class")
    table.add_column("Completed")
    table.add_column("Completed at")
    table.add_column("Last accessed")
    for record in records:
        table.add_row(
            record.unit_id,
            record.subject_id,
            record.class_id,
            "✓" if record.completed else "",
            record.completed_at.isoformat() if record.completed_at else "-",
            record.last_accessed_at.isoformat(),
        )
    console.print(table)


@progress_app.command("subject")
def progress_subject(
    ctx: typer.Context,
    subject_id: str = typer.Argument(..., help="Subject id"),
    class_id: str = typer.Option(..., "--class", "-c", help="Class id"),
):
    """Completion percentage of a subject (total units from the chapter list)."""

    async def action(rt: LearnSyncRuntime):
        chapters = await rt.resolver.get_chapters(subject_id)
        total = len(chapters) if isinstance(chapters, list) else 0
        return rt.ledger.aggregate(subject_id, class_id, total)

    summary = _run(ctx, action)
    console.print(
        f"{summary.subject_id}: {summary.completed_count}/{summary.total_units} "
        f"({summary.percent_complete}%)"
    )


@progress_app.command("class")
def progress_class(ctx: typer.Context, class_id: str = typer.Argument(..., help="Class id")):
    """Completion summary across a class."""

    async def action(rt: LearnSyncRuntime):
        return rt.ledger.class_progress(class_id)

    summary = _run(ctx, action)
    console.print(
        f"{summary.class_id}: {summary.completed_count}/{summary.tracked_units} units "
        f"across {summary.total_subjects} subjects ({summary.percent_complete}%)"
    )


@progress_app.command("reset")
def progress_reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Clear all progress records."""
    if not yes and not typer.confirm("Delete all local progress?"):
        raise typer.Abort()

    async def action(rt: LearnSyncRuntime):
        rt.ledger.reset()

    _run(ctx, action)
    console.print("[yellow]Progress cleared[/yellow]")


# ============================================================================
# SYNC COMMANDS
# ============================================================================


@sync_app.command("status")
def sync_status(ctx: typer.Context):
    """Show pending mutations."""

    async def action(rt: LearnSyncRuntime):
        return rt.queue.peek_all()

    pending = _run(ctx, action)
    console.print(f"[bold]{len(pending)}[/bold] pending")
    if not pending:
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID")
    table.add_column("Type")
    table.add_column("Enqueued")
    table.add_column("Rejections", justify="right")
    for mutation in pending:
        table.add_row(
            mutation.id,
            mutation.type.value,
            mutation.enqueued_at.isoformat(),
            str(mutation.attempts),
        )
    console.print(table)


@sync_app.command("now")
def sync_now(ctx: typer.Context):
    """Replay the queue against the remote service."""
    result = _run(ctx, lambda rt: rt.coordinator.sync_now())
    if result.skipped:
        console.print(f"[yellow]Skipped[/yellow] ({result.remaining} pending)")
        return
    console.print(
        f"Delivered {len(result.delivered)}, dropped {len(result.dropped)}, "
        f"{result.remaining} remaining"
    )
    if result.error:
        console.print(f"[red]Stopped:[/red] {result.error}")


@sync_app.command("watch")
def sync_watch(
    ctx: typer.Context,
    interval: float = typer.Option(5.0, "--interval", "-i", help="Seconds between checks"),
):
    """Replay the queue on startup and whenever connectivity returns (Ctrl+C to stop)."""
    console.print(f"Watching connectivity every {interval}s")
    try:
        results = _run(ctx, lambda rt: rt.coordinator.watch(interval))
    except KeyboardInterrupt:
        console.print("[dim]Stopped[/dim]")
        return
    console.print(f"{len(results)} replays")


@sync_app.command("clear")
def sync_clear(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Drop every pending mutation without delivering it."""
    if not yes and not typer.confirm("Drop all pending sync items?"):
        raise typer.Abort()

    async def action(rt: LearnSyncRuntime):
        rt.queue.clear()

    _run(ctx, action)
    console.print("[yellow]Sync queue cleared[/yellow]")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
