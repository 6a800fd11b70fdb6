"""Innrvo Command Line Interface.

Usage:
    innrvo detect TEXT         Classify a request
    innrvo prompt TEXT         Plan a generation prompt for a request
    innrvo chat [MESSAGE]      Talk to the wellness guide (needs Ollama)
    innrvo catalog             List content categories
    innrvo rules check PATH    Validate a detection rule file
    innrvo config              Manage configuration
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table
from typer import Argument, Option

from innrvo.config import Config, get_config, reload_config, write_default_config
from innrvo.errors import InnrvoError, RuleTableError
from innrvo.paths import paths

app = typer.Typer(
    name="innrvo",
    help="Innrvo - intent detection and prompt planning for wellness content",
    add_completion=True,
    no_args_is_help=True,
)

config_app = typer.Typer(help="Configuration management")
rules_app = typer.Typer(help="Detection rule files")

app.add_typer(config_app, name="config")
app.add_typer(rules_app, name="rules")

console = Console()


def _get_version() -> str:
    """Get package version."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("innrvo")
    except PackageNotFoundError:
        return "0.0.0"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Innrvo version {_get_version()}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        Option("--version", "-V", callback=version_callback, is_eager=True, help="Show version"),
    ] = False,
    verbose: Annotated[
        bool,
        Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Innrvo - intent detection and prompt planning for wellness content."""
    if verbose:
        os.environ["INNRVO_LOG_LEVEL"] = "DEBUG"
        reload_config()


def _load_detector():
    from innrvo.content import ContentDetector
    from innrvo.logging_config import setup_logging_from_config

    config = get_config()
    setup_logging_from_config(config)
    try:
        return ContentDetector.from_config(config)
    except RuleTableError as e:
        console.print(f"[red]Invalid rule file: {e}[/red]")
        raise typer.Exit(1) from e


# =============================================================================
# Detection Commands
# =============================================================================


@app.command()
def detect(
    text: Annotated[str, Argument(help="Request to classify")],
    json_output: Annotated[bool, Option("--json", "-j", help="JSON output")] = False,
) -> None:
    """Classify a request into a content category and sub-type."""
    result = _load_detector().detect(text)

    if json_output:
        console.print_json(json.dumps(result.to_dict()))
        return

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="dim")
    table.add_column("Value")

    table.add_row("Category", result.category.value)
    table.add_row("Sub-type", result.sub_type)
    table.add_row("Confidence", str(result.confidence))
    table.add_row("Audience", result.audience.value)
    if result.depth:
        table.add_row("Depth", result.depth.value)
    if result.age_group:
        table.add_row("Age group", result.age_group.value)
    if result.duration_minutes:
        table.add_row("Duration", f"{result.duration_minutes} min")
    if result.extracted_goal:
        table.add_row("Goal", result.extracted_goal)
    console.print(table)

    if result.needs_disambiguation:
        console.print(f"\n[yellow]{result.disambiguation_question}[/yellow]")
        for i, alt in enumerate(result.candidates(), 1):
            console.print(f"  [dim]{i}.[/dim] {alt.category.value}:{alt.sub_type} ({alt.confidence})")


@app.command()
def prompt(
    text: Annotated[str, Argument(help="Request to plan")],
    duration: Annotated[
        Optional[int],
        Option("--duration", "-d", min=1, help="Override duration in minutes"),
    ] = None,
    goal: Annotated[Optional[str], Option("--goal", "-g", help="Override the goal")] = None,
    show_prompt: Annotated[bool, Option("--show-prompt", "-p", help="Print the prompt text")] = False,
    json_output: Annotated[bool, Option("--json", "-j", help="JSON output")] = False,
) -> None:
    """Detect, route and build the generation prompt for a request."""
    from innrvo.content import ContentRouter, build_content_prompt

    result = _load_detector().detect(text)
    if result.needs_disambiguation:
        console.print(f"[yellow]{result.disambiguation_question}[/yellow]")
        raise typer.Exit(2)

    routed = ContentRouter().route(result, duration_minutes=duration, goal=goal)
    built = build_content_prompt(routed.params)
    budget = built.budget

    if json_output:
        data = {
            "category": routed.params.category.value,
            "sub_type": routed.params.sub_type,
            "duration_minutes": routed.params.duration_minutes,
            "goal": routed.params.goal,
            "confirmation": routed.confirmation,
            "target_words": budget.target_words,
            "word_range": budget.word_range,
            "temperature": built.temperature,
            "max_tokens": built.max_tokens,
            "prompt": built.prompt,
        }
        console.print_json(json.dumps(data))
        return

    console.print(f"[cyan]{routed.confirmation}[/cyan]\n")

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="dim")
    table.add_column("Value")
    table.add_row("Duration", f"{routed.params.duration_minutes} min")
    table.add_row("Goal", routed.params.goal)
    table.add_row("Words", f"{budget.target_words} ({budget.word_range})")
    if budget.statements:
        table.add_row("Statements", str(budget.statements))
    for phase in budget.phases:
        table.add_row(f"  {phase.name}", f"~{phase.words} words")
    table.add_row("Temperature", str(built.temperature))
    table.add_row("Max tokens", str(built.max_tokens))
    console.print(table)

    if show_prompt:
        console.print()
        console.print(built.prompt, markup=False, highlight=False)


@app.command()
def catalog() -> None:
    """List content categories with their durations and sub-types."""
    from innrvo.content import CONTENT_CATEGORIES

    table = Table(title="Content Categories", show_header=True)
    table.add_column("Category", style="cyan")
    table.add_column("Name")
    table.add_column("Minutes (min/rec/max)")
    table.add_column("Sub-types")

    for info in CONTENT_CATEGORIES.values():
        d = info.default_duration
        table.add_row(info.id.value, info.name, f"{d.min}/{d.recommended}/{d.max}", ", ".join(info.sub_types))

    console.print(table)


# =============================================================================
# Chat Commands
# =============================================================================


def _make_generate_text(config: Config):
    from innrvo.providers import OllamaProvider

    return OllamaProvider.from_config(config.ollama).generate_text


@app.command()
def chat(
    message: Annotated[
        Optional[str],
        Argument(help="Message to send (interactive if omitted)"),
    ] = None,
) -> None:
    """Start interactive chat or send a single message."""
    from innrvo.agent import MeditationAgent
    from innrvo.logging_config import setup_logging_from_config

    config = get_config()
    setup_logging_from_config(config)
    try:
        agent = MeditationAgent.from_config(_make_generate_text(config), config)
    except RuleTableError as e:
        console.print(f"[red]Invalid rule file: {e}[/red]")
        raise typer.Exit(1) from e

    def respond(text: str) -> None:
        try:
            response = agent.chat(text)
        except InnrvoError as e:
            console.print(f"[red]{e}[/red]")
            return
        console.print(f"\n[bold cyan]Guide:[/bold cyan] {response.message}\n")
        if response.content_prompt is not None:
            budget = response.content_prompt.budget
            console.print(
                f"[dim]Ready to generate {response.params.category.value}:{response.params.sub_type}, "
                f"{budget.word_range} words[/dim]\n"
            )

    if message:
        respond(message)
        return

    console.print("[cyan]Innrvo Chat[/cyan] (type 'exit' to quit)\n")
    while True:
        try:
            user_input = console.input("[bold]You:[/bold] ")
        except (KeyboardInterrupt, EOFError):
            break
        if user_input.lower() in ("exit", "quit", "q"):
            break
        if user_input.strip():
            respond(user_input)

    console.print("\n[dim]Goodbye![/dim]")


# =============================================================================
# Rule Commands
# =============================================================================


@rules_app.command("check")
def rules_check(
    path: Annotated[Path, Argument(help="TOML rule file")],
) -> None:
    """Validate a rule file and summarize its tables."""
    from innrvo.content import load_rules

    try:
        rules = load_rules(path)
    except RuleTableError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    console.print(
        f"[green]OK[/green] {len(rules.explicit)} explicit, "
        f"{len(rules.ambiguous)} ambiguous, {len(rules.clusters)} clusters"
    )


# =============================================================================
# Config Commands
# =============================================================================


@config_app.command("show")
def config_show(
    json_output: Annotated[bool, Option("--json", "-j", help="JSON output")] = False,
) -> None:
    """Show current configuration."""
    config_data = get_config().to_dict()

    if json_output:
        console.print_json(json.dumps(config_data))
        return

    table = Table(title="Innrvo Configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for section, values in config_data.items():
        for key, value in values.items():
            table.add_row(f"{section}.{key}", str(value) if value is not None else "[dim]not set[/dim]")

    console.print(table)


@config_app.command("path")
def config_path() -> None:
    """Show configuration file path."""
    console.print(str(paths.config_file))


@config_app.command("init")
def config_init(
    path: Annotated[Optional[Path], Option("--path", help="Where to write the file")] = None,
    force: Annotated[bool, Option("--force", "-f", help="Overwrite an existing file")] = False,
) -> None:
    """Write a default configuration file."""
    target = path or paths.config_file
    if target.exists() and not force:
        console.print(f"[yellow]Config already exists at {target} (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)
    written = write_default_config(target)
    console.print(f"[green]Wrote default config to {written}[/green]")


def main_cli() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main_cli()
