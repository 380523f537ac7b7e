"""
lobquiz - developer CLI for LOB quiz content.

Checks stored quiz JSON the same way the engine reads it, so content authors
and CI pipelines see normalization errors before learners do.

Usage:
    lobquiz validate content/          # Validate every JSON file in a directory
    lobquiz validate quiz.json -o r.json
    lobquiz inspect quiz.json          # Show the normalized quiz
    lobquiz kinds                      # List question kinds and their aliases
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress
from rich.table import Table
from rich.text import Text

from config import get_settings
from src.quiz import QuestionKind, normalize_content, to_raw
from src.quiz.kinds import aliases_for
from src.quiz.models import Quiz

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="lobquiz",
    help="LOB quiz content tools",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

RAW_PREVIEW_CHARS = 400


def _raw_preview(raw: Any) -> str:
    text = raw if isinstance(raw, str) else json.dumps(raw, indent=2, default=str)
    if len(text) > RAW_PREVIEW_CHARS:
        text = text[:RAW_PREVIEW_CHARS] + "\n..."
    return text


# =============================================================================
# Validate
# =============================================================================


@app.command()
def validate(
    path: Annotated[Path, typer.Argument(help="Quiz JSON file or directory of files")],
    strict: Annotated[
        bool, typer.Option("--strict", "-s", help="Fail on warnings")
    ] = False,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Output report path")
    ] = None,
) -> None:
    """
    Validate stored quiz content.

    Exit codes:
        0 - All content valid
        1 - Normalization errors found
        2 - Warnings found (with --strict)
    """
    if not path.exists():
        console.print(f"[red]✗ Path not found: {path}[/]")
        raise typer.Exit(1)

    if path.is_file():
        files = [path]
    else:
        files = sorted(path.rglob(get_settings().quiz_content_glob))
    console.print(f"[cyan]Validating {len(files)} file(s) in {path}...[/]")

    errors: list[dict[str, Any]] = []
    warnings: list[str] = []

    with Progress(console=console, transient=True) as progress:
        task = progress.add_task("Validating...", total=len(files))
        for file in files:
            file_errors, file_warnings = _validate_file(file)
            errors.extend(file_errors)
            warnings.extend(file_warnings)
            progress.advance(task)

    _print_validation_report(errors, warnings, output)

    if errors:
        raise typer.Exit(1)
    if warnings and strict:
        raise typer.Exit(2)


def _validate_file(file: Path) -> tuple[list[dict[str, Any]], list[str]]:
    """Normalize one file and collect its problems."""
    content = file.read_text(encoding="utf-8", errors="replace")
    result = normalize_content(content)
    if not result.ok:
        logger.debug(f"{file}: {result.error.code}")
        return [{"file": str(file), **result.error.to_dict(), "raw": result.error.raw}], []

    quiz = result.quiz
    warnings = []
    if quiz.question_count == 0:
        warnings.append(f"{file}: Quiz has no questions")
    if quiz.declared_total_points is not None and quiz.declared_total_points != quiz.total_points:
        warnings.append(
            f"{file}: Declares {quiz.declared_total_points} total points, "
            f"questions add up to {quiz.total_points}"
        )
    return [], warnings


def _print_validation_report(
    errors: list[dict[str, Any]], warnings: list[str], output: Path | None
) -> None:
    """Print validation results."""
    if errors:
        console.print("\n[red bold]ERRORS:[/]")
        for error in errors:
            message = f"{error['file']}: [{error['code']}] {error['message']}"
            console.print(f"  [red]✗[/] {escape(message)}")
            console.print(Panel(Text(_raw_preview(error["raw"])), title="raw", border_style="dim"))

    if warnings:
        console.print("\n[yellow bold]WARNINGS:[/]")
        for warning in warnings:
            console.print(f"  [yellow]⚠[/] {escape(warning)}")

    if not errors and not warnings:
        console.print("\n[green]✓ All content valid![/]")

    console.print(f"\n[dim]Errors: {len(errors)} | Warnings: {len(warnings)}[/]")

    if output:
        report = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "errors": [{k: v for k, v in e.items() if k != "raw"} for e in errors],
            "warnings": warnings,
            "summary": {
                "error_count": len(errors),
                "warning_count": len(warnings),
                "status": "pass" if not errors else "fail",
            },
        }
        output.write_text(json.dumps(report, indent=2))
        console.print(f"[dim]Report written to {output}[/]")


# =============================================================================
# Inspect
# =============================================================================


@app.command()
def inspect(
    file: Annotated[Path, typer.Argument(help="Quiz JSON file")],
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the canonical envelope JSON instead")
    ] = False,
) -> None:
    """Show how the engine reads a quiz file."""
    if not file.is_file():
        console.print(f"[red]✗ File not found: {file}[/]")
        raise typer.Exit(1)

    result = normalize_content(file.read_text(encoding="utf-8", errors="replace"))
    if not result.ok:
        console.print(f"[red]✗ {escape(f'[{result.error.code}] {result.error.message}')}[/]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(to_raw(result.quiz)))
        return
    _print_quiz(result.quiz)


def _print_quiz(quiz: Quiz) -> None:
    settings = quiz.settings
    flags = [
        name
        for name, on in (
            ("randomize questions", settings.randomize_questions),
            ("randomize options", settings.randomize_options),
            ("retry", settings.allow_retry),
            ("show answers", settings.show_correct_answers),
        )
        if on
    ]
    console.print(
        Panel(
            f"[bold]{escape(quiz.title)}[/]\n"
            f"Questions: {quiz.question_count} | Points: {quiz.total_points:g}"
            + (f" | Pass: {quiz.passing_score_percent:g}%" if quiz.passing_score_percent else "")
            + (f" | Time: {quiz.time_limit_minutes:g} min" if quiz.time_limit_minutes else "")
            + f"\nSettings: {', '.join(flags) or 'none'}",
            border_style="cyan",
        )
    )

    table = Table(title="Questions")
    table.add_column("#", style="dim", justify="right")
    table.add_column("ID", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("Points", justify="right")
    table.add_column("Prompt")
    table.add_column("Answer", style="green")

    for i, question in enumerate(quiz.questions, 1):
        prompt = question.prompt if len(question.prompt) <= 60 else question.prompt[:57] + "..."
        answer = question.correct_answer
        table.add_row(
            str(i),
            escape(question.id),
            question.kind.value,
            f"{question.points:g}",
            escape(prompt),
            "(human graded)" if answer is None else escape(str(answer)),
        )
    console.print(table)


# =============================================================================
# Kinds
# =============================================================================


@app.command()
def kinds() -> None:
    """List question kinds and the stored aliases that map to them."""
    table = Table(title="Question Kinds")
    table.add_column("Kind", style="cyan")
    table.add_column("Aliases", style="dim")
    for kind in QuestionKind:
        table.add_row(kind.value, ", ".join(a for a in aliases_for(kind) if a != kind.value))
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Verbose output")
    ] = False,
) -> None:
    """
    LOB quiz content tools.

    \b
    Quick Start:
      lobquiz validate ./content   # Validate every quiz file
      lobquiz inspect quiz.json    # Show the normalized quiz
      lobquiz kinds                # List kind aliases
    """
    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else settings.log_level,
        format=settings.log_format,
    )


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
