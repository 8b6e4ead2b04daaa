"""
CLI interface for AI Code Generator.

Provides command-line access to generation, history and statistics.
"""

import logging
import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from ai_codegen import __version__
from ai_codegen.config.loader import load_config
from ai_codegen.core.languages import SUPPORTED_LANGUAGES
from ai_codegen.core.models import GenerationRequest
from ai_codegen.log_setup import configure_logging
from ai_codegen.services import Services, build_services
from ai_codegen.storage.models import HistoryRecord
from ai_codegen.storage.repository import initialize_schema

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to YAML configuration file"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging"
    )
):
    """AI Code Generator CLI."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)
    ctx.obj = {"config_path": config}
    if ctx.invoked_subcommand is None:
        console.print("AI Code Generator - Use --help to see available commands")


def _services(ctx: typer.Context) -> Services:
    config_path = (ctx.obj or {}).get("config_path")
    try:
        return build_services(load_config(config_path))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Configuration error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def init(ctx: typer.Context):
    """Initialize the history database."""
    try:
        config = load_config((ctx.obj or {}).get("config_path"))
        initialize_schema(config.storage.db_path)
        console.print(f"[green]✓[/] Database initialized at {config.storage.db_path}")
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error initializing database:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def generate(
    ctx: typer.Context,
    prompt: str = typer.Argument(..., help="What the code should do"),
    language: str = typer.Option(
        ...,
        "--language",
        "-l",
        help="Target programming language"
    )
):
    """Generate code for a prompt and record the attempt."""
    services = _services(ctx)
    outcome = services.orchestrator.handle(GenerationRequest(prompt, language))

    if not outcome.success:
        console.print(f"[red]Generation failed:[/] {outcome.error_message}")
        for field_name, message in outcome.field_errors.items():
            console.print(f"  {field_name}: {message}")
        sys.exit(EXIT_CODE_FAIL)

    console.print(Syntax(outcome.generated_code, _lexer_name(language), line_numbers=False))
    console.print(f"\n[dim]Generated in {outcome.execution_time_ms}ms[/]")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def history(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Show the most recent N attempts (clamped to 1..100)"
    ),
    language: Optional[str] = typer.Option(
        None,
        "--language",
        "-l",
        help="Only attempts for this language"
    ),
    search: Optional[str] = typer.Option(
        None,
        "--search",
        "-s",
        help="Only attempts whose prompt contains this keyword"
    )
):
    """List recorded generation attempts."""
    statistics = _services(ctx).statistics

    if search is not None:
        records = statistics.search_history(search)
    elif language is not None:
        records = statistics.history_by_language(language)
    else:
        records = statistics.recent_history(limit)

    if not records:
        console.print("\n[bold yellow]No generation history found[/]\n")
        sys.exit(EXIT_CODE_PASS)

    _display_history(records)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def stats(ctx: typer.Context):
    """Show aggregate generation statistics."""
    summary = _services(ctx).statistics.summary()

    console.print("\n[bold]Code Generation Statistics[/bold]")
    console.print("-" * 40)
    console.print(f"Total generations: {summary.total}")
    console.print(f"Successful: {summary.successful}")
    console.print(f"Failed: {summary.failed}")
    console.print(f"Success rate: {summary.success_rate:.2f}%")
    console.print(f"Average execution time: {summary.average_execution_time_ms:.2f}ms")

    if summary.language_usage:
        table = Table(title="Language usage")
        table.add_column("Language")
        table.add_column("Count", justify="right")
        table.add_column("Avg time (ms)", justify="right")
        for stat in summary.language_usage:
            table.add_row(stat.language, str(stat.count), f"{stat.average_execution_time_ms:.2f}")
        console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def health(ctx: typer.Context):
    """Check that the history store is reachable."""
    services = _services(ctx)
    result = services.statistics.health()

    if result["status"] == "UP":
        console.print(f"[green]✓[/] UP - {result['totalGenerations']} generations recorded")
    else:
        console.print(f"[yellow]![/] DEGRADED - {result['database']}")

    if not services.client.is_configured():
        console.print("[yellow]![/] Generation API key is not configured")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def languages():
    """List supported languages."""
    console.print(", ".join(SUPPORTED_LANGUAGES))


@app.command()
def version():
    """Show the application version."""
    console.print(f"AI Code Generator {__version__}")


@app.command()
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8080, "--port", "-p", help="Bind port")
):
    """Run the HTTP API."""
    import uvicorn

    from ai_codegen.api.app import create_app

    configure_logging(logging.INFO)
    api = create_app(services=_services(ctx))
    uvicorn.run(api, host=host, port=port)


def _lexer_name(language: str) -> str:
    return {
        "c++": "cpp",
        "c#": "csharp",
        "node.js": "javascript",
        "react": "jsx",
        "spring boot": "java",
    }.get(language.strip().lower(), language.strip().lower())


def _display_history(records: List[HistoryRecord]):
    table = Table(title="Generation history")
    table.add_column("ID", justify="right")
    table.add_column("Created")
    table.add_column("Language")
    table.add_column("Status")
    table.add_column("Time (ms)", justify="right")
    table.add_column("Prompt")

    for record in records:
        status = "[green]ok[/]" if record.success else "[red]failed[/]"
        prompt = record.prompt if len(record.prompt) <= 60 else record.prompt[:57] + "..."
        table.add_row(
            str(record.id),
            record.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            record.language,
            status,
            str(record.execution_time_ms),
            prompt
        )
    console.print(table)


if __name__ == "__main__":
    app()
