"""
Command line entry point: turn a photo into five contrarian startup ideas.
"""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.prompt import Prompt
from rich.table import Table

from bigtoy.capture import FileImageSource
from bigtoy.factory import create_flow
from bigtoy.flow import CaptureFlow
from bigtoy.models.idea import Language
from bigtoy.render import render_view
from bigtoy.utils.config import config
from bigtoy.view_model import Phase, ViewState

app = typer.Typer(help="Snap a photo, get five contrarian startup ideas.")
console = Console()

FlowAction = Callable[[CaptureFlow], Awaitable[ViewState]]


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs.")):
    if verbose:
        logging.getLogger("bigtoy").setLevel(logging.DEBUG)


async def watch(flow: CaptureFlow, action: FlowAction, expanded: bool) -> ViewState:
    """Run a flow action while redrawing the cards on every view change."""
    with Live(render_view(flow.view, expanded), console=console, refresh_per_second=8) as live:
        unsubscribe = flow.subscribe(lambda view: live.update(render_view(view, expanded)))
        try:
            view = await action(flow)
        finally:
            unsubscribe()
        live.update(render_view(view, expanded))
    return view


async def run_flow(action: FlowAction, user_id: str, expanded: bool, interactive: bool) -> ViewState:
    async with create_flow() as flow:
        view = await watch(flow, action, expanded)

        while interactive and view.phase == Phase.RESULTS and view.has_error:
            choices = ["r", "t", "q"] if view.can_retry else ["t", "q"]
            choice = Prompt.ask("Retry, take another photo or quit?", choices=choices, default="q", console=console)
            if choice == "r":
                view = await watch(flow, lambda f: f.retry(), expanded)
            elif choice == "t":
                image_path = Prompt.ask("Path to the new photo", console=console)
                flow.retake()
                source = FileImageSource(image_path)
                view = await watch(flow, lambda f: f.capture_and_analyze(source, user_id), expanded)
            else:
                break

        return view


def _require_user_id(user_id: Optional[str]) -> str:
    if not user_id:
        console.print("[bold red]No user id. Sign in first or pass --user-id / set BIGTOY_USER_ID.[/bold red]")
        raise typer.Exit(code=2)
    return user_id


def _finish(view: ViewState):
    if view.has_error:
        raise typer.Exit(code=1)


@app.command()
def analyze(
    image_path: Path = typer.Argument(..., help="Photo to analyze."),
    user_id: Optional[str] = typer.Option(config.user_id, "--user-id", help="Signed-in user id."),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="en, zh, fr or ja."),
    compact: bool = typer.Option(False, "--compact", help="Show collapsed cards."),
    interactive: bool = typer.Option(True, "--interactive/--no-interactive", help="Offer retry/retake after a failure."),
):
    """Upload a photo and stream ideas for it."""
    user_id = _require_user_id(user_id)
    source = FileImageSource(image_path)

    async def action(flow: CaptureFlow) -> ViewState:
        return await flow.capture_and_analyze(source, user_id, language)

    try:
        view = asyncio.run(run_flow(action, user_id, not compact, interactive and console.is_terminal))
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=2)
    _finish(view)


@app.command("analyze-url")
def analyze_url(
    image_url: str = typer.Argument(..., help="Public URL of an uploaded photo."),
    user_id: Optional[str] = typer.Option(config.user_id, "--user-id", help="Signed-in user id."),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="en, zh, fr or ja."),
    compact: bool = typer.Option(False, "--compact", help="Show collapsed cards."),
    interactive: bool = typer.Option(True, "--interactive/--no-interactive", help="Offer retry/retake after a failure."),
):
    """Stream ideas for an image that is already hosted (no upload)."""
    user_id = _require_user_id(user_id)

    async def action(flow: CaptureFlow) -> ViewState:
        return await flow.analyze_url(image_url, user_id, language)

    try:
        view = asyncio.run(run_flow(action, user_id, not compact, interactive and console.is_terminal))
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=2)
    _finish(view)


@app.command()
def languages():
    """List the languages ideas can be generated in."""
    table = Table(title="Languages")
    table.add_column("Code")
    table.add_column("Language")
    table.add_column("Flag")
    for language in Language:
        table.add_row(language.value, language.label, language.flag)
    console.print(table)


if __name__ == "__main__":
    app()
