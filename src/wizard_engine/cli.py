"""CLI entry point for wizard-engine diagnostics"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from wizard_engine.config import create_state_service, load_settings
from wizard_engine.core.flows import default_registry
from wizard_engine.core.step import Step
from wizard_engine.exceptions import WizardError
from wizard_engine.parser.definition_parser import WizardDefinitionParser, build_wizard

app = typer.Typer(
    name="wizard-engine",
    help="Wizard Engine - inspect wizard definitions and persisted state",
    add_completion=False
)
console = Console()


def handle_wizard_error(error: WizardError, exit_code: int = 1):
    """Handle wizard errors with Rich formatting

    Args:
        error: Wizard exception to handle
        exit_code: Exit code to use
    """
    if error.help_text:
        panel_content = f"{error.message}\n\n[bold cyan]Help:[/bold cyan]\n{error.help_text}"
    else:
        panel_content = error.message

    panel = Panel(
        panel_content,
        title="[bold red]Error[/bold red]",
        border_style="red",
        expand=False
    )

    console.print(panel)
    raise typer.Exit(exit_code)


def _configure(config: Optional[Path], verbose: bool):
    settings = load_settings(config)
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, settings.log_level),
        format="%(levelname)s %(name)s: %(message)s"
    )
    return settings


def _load_flows(modules: Optional[List[str]]) -> None:
    for module in modules or []:
        default_registry.load_module(module)


def _step_label(step: Step) -> Text:
    text = Text(step.name, style="bold")
    if step.label:
        text.append(f"  {step.label}", style="dim")
    if step.flow_key:
        text.append(f"  flow={step.flow_key}", style="cyan")
    if step.fields:
        text.append(f"  [{', '.join(step.fields)}]", style="green")
    if step.is_last():
        text.append("  (terminal)", style="yellow")
    return text


def _add_branch(tree: Tree, step: Step) -> None:
    for child in step.children:
        _add_branch(tree.add(_step_label(child)), child)


@app.command()
def tree(
    definition: Path = typer.Argument(..., help="Wizard definition YAML file"),
    flows: Optional[List[str]] = typer.Option(None, "--flows", help="Module registering flows"),
    config: Optional[Path] = typer.Option(None, "--config", help="Settings file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Render the step tree of a wizard definition"""
    try:
        settings = _configure(config, verbose)
        _load_flows(flows)
        wizard = build_wizard(
            WizardDefinitionParser().parse_yaml(definition),
            directory=settings.steps_directory
        )

        root = Tree(_step_label(wizard.root))
        _add_branch(root, wizard.root)
        console.print(Panel(root, title=f"[bold blue]{wizard.name}[/bold blue]", expand=False))
    except WizardError as e:
        handle_wizard_error(e)


@app.command()
def check(
    definition: Path = typer.Argument(..., help="Wizard definition YAML file"),
    flows: Optional[List[str]] = typer.Option(None, "--flows", help="Module registering flows"),
    config: Optional[Path] = typer.Option(None, "--config", help="Settings file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Validate a wizard definition and its flow registrations"""
    try:
        _configure(config, verbose)
        _load_flows(flows)
        wizard = build_wizard(WizardDefinitionParser().parse_yaml(definition))
    except WizardError as e:
        handle_wizard_error(e)

    problems = wizard.check()
    if problems:
        for problem in problems:
            console.print(f"[red]✗[/red] {problem}")
        raise typer.Exit(1)

    console.print(
        f"[green]✓[/green] Wizard '{wizard.name}' is valid "
        f"({len(wizard.get_all_steps())} steps)"
    )


@app.command()
def state(
    name: str = typer.Argument(..., help="Wizard name"),
    config: Optional[Path] = typer.Option(None, "--config", help="Settings file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Show the persisted state of a wizard"""
    try:
        settings = _configure(config, verbose)
        service = create_state_service(settings)
        if not service.exists(name):
            console.print(f"[yellow]No persisted state for wizard '{name}'[/yellow]")
            raise typer.Exit(1)
        saved = service.load_state(name)
    except WizardError as e:
        handle_wizard_error(e)

    table = Table(title=f"Wizard '{name}'", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("current", saved["current"] or "(root)")
    table.add_row("data", json.dumps(saved["data"] or {}, indent=2, sort_keys=True))
    console.print(table)


@app.command()
def reset(
    name: str = typer.Argument(..., help="Wizard name"),
    config: Optional[Path] = typer.Option(None, "--config", help="Settings file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Delete the persisted state of a wizard"""
    try:
        settings = _configure(config, verbose)
        create_state_service(settings).forget(name)
    except WizardError as e:
        handle_wizard_error(e)

    console.print(f"[green]✓[/green] Persisted state of '{name}' removed")


def main():
    app()


if __name__ == "__main__":
    main()
