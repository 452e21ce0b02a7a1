"""
agent-engine CLI - run the agents from a terminal.

Commands:
    agent-engine react "What is 2+3*4?"      Single-agent ReAct loop
    agent-engine collaborate "Plan a launch" Multi-agent collaboration
    agent-engine tools                       List registered tools
"""

import asyncio
import json
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import EngineSettings
from .errors import AgentEngineError
from .react import RunStatus
from .service import AgentService

app = typer.Typer(help="ReAct tool loop and multi-agent collaboration")
console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_service(
    provider: str | None,
    model: str | None,
    max_steps: int | None,
    markers: str | None,
    verbose: bool,
) -> AgentService:
    settings = EngineSettings.from_env()
    if provider:
        settings.provider = provider
    if model:
        settings.model = model
    if max_steps is not None:
        settings.max_steps = max_steps
    if markers:
        settings.markers = markers
    _setup_logging("DEBUG" if verbose else settings.log_level)
    return AgentService(settings=settings)


ProviderOption = typer.Option(None, help="anthropic, openai or google (default: auto-detect)")
ModelOption = typer.Option(None, help="Provider model name")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Debug logging")


# =============================================================================
# REACT
# =============================================================================


@app.command()
def react(
    question: str = typer.Argument(..., help="Question or task"),
    provider: str = ProviderOption,
    model: str = ModelOption,
    max_steps: int = typer.Option(None, min=1, help="Step budget (default 5)"),
    markers: str = typer.Option(None, help="Marker grammar: zh or en"),
    verbose: bool = VerboseOption,
):
    """Answer a question with the single-agent tool loop."""
    service = _build_service(provider, model, max_steps, markers, verbose)

    try:
        run = asyncio.run(service.run_single_agent(question))
    except (AgentEngineError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    table = Table(title="Steps")
    table.add_column("#", style="bold")
    table.add_column("Thought")
    table.add_column("Action")
    table.add_column("Observation / Answer")
    for step in run:
        if step.is_final:
            table.add_row(
                str(step.step_index), escape(step.thought), "", f"[green]{escape(step.answer)}[/green]"
            )
        else:
            action = escape(f"{step.action} {json.dumps(step.action_input, ensure_ascii=False)}")
            observation = escape(step.observation)
            if step.error:
                observation = f"[red]{observation}[/red]"
            table.add_row(str(step.step_index), escape(step.thought), action, observation)
    console.print(table)

    if run.status is RunStatus.COMPLETED:
        console.print(Panel(escape(run.answer or ""), title="Final answer", border_style="green"))
    elif run.status is RunStatus.EXHAUSTED:
        console.print(f"[yellow]No final answer within {run.max_steps} steps[/yellow]")
        raise typer.Exit(2)
    else:
        console.print("[yellow]Model output could not be parsed; last output:[/yellow]")
        console.print(run.last_raw_output, markup=False)
        raise typer.Exit(3)


# =============================================================================
# COLLABORATE
# =============================================================================


@app.command()
def collaborate(
    task: str = typer.Argument(..., help="Task for the role agents"),
    provider: str = ProviderOption,
    model: str = ModelOption,
    show_rounds: bool = typer.Option(False, "--show-rounds", help="Print every role's output"),
    verbose: bool = VerboseOption,
):
    """Run the two-round multi-agent collaboration."""
    service = _build_service(provider, model, None, None, verbose)

    try:
        result = asyncio.run(service.run_multi_agent(task))
    except (AgentEngineError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if show_rounds:
        for key, text in result.individual_results.items():
            console.print(Panel(escape(text), title=key))
    console.print(Panel(escape(result.final_answer), title="Final answer", border_style="green"))
    console.print(f"[dim]{result.duration_seconds:.1f}s[/dim]")


# =============================================================================
# TOOLS
# =============================================================================


@app.command()
def tools():
    """List the registered tools."""
    service = AgentService(settings=EngineSettings.from_env())

    table = Table(title="Tools")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Arguments")
    for tool in service.registry.list_all():
        properties = tool.input_schema.get("properties", {})
        required = set(tool.input_schema.get("required", []))
        args = ", ".join(f"{name}{'' if name in required else '?'}" for name in properties)
        table.add_row(tool.name, escape(tool.description), args)
    console.print(table)


if __name__ == "__main__":
    app()
