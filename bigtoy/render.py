"""
Rich renderables for the stacked idea cards.
"""

from typing import List, Tuple

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from bigtoy.constants import LOADING_MESSAGE, MAX_IDEAS
from bigtoy.models.idea import Idea
from bigtoy.view_model import Phase, ViewState

TITLE = "Next BIG TOY"

# (field, label, style); the first two make up the collapsed card
CARD_SECTIONS: List[Tuple[str, str, str]] = [
    ("source", "Idea Source", "bold blue"),
    ("market_potential", "Market Potential", "bold white"),
    ("strategy", "Strategy", "bold green"),
    ("marketing", "Marketing", "bold magenta"),
    ("target_audience", "Target Audience", "bold yellow"),
]
COLLAPSED_SECTIONS = 2


def render_idea(idea: Idea, index: int, expanded: bool = True) -> Panel:
    sections = CARD_SECTIONS if expanded else CARD_SECTIONS[:COLLAPSED_SECTIONS]
    body = Table.grid(padding=(0, 1))
    body.add_column(no_wrap=True)
    body.add_column(ratio=1)
    for field, label, style in sections:
        body.add_row(Text(label, style=style), Text(getattr(idea, field)))
    return Panel(body, title=f"Idea Kit {index + 1}", title_align="left", border_style="cyan")


def render_error(view: ViewState) -> Panel:
    hints = []
    if view.can_retry:
        hints.append("[r]etry with the same photo")
    hints.append("[t]ake another photo")
    message = Text(view.error_message or "", style="bold red")
    message.append("\n" + " / ".join(hints), style="dim")
    return Panel(message, title="Something went wrong", border_style="red")


def render_view(view: ViewState, expanded: bool = True) -> RenderableType:
    """
    Build the renderable for one view-model frame.

    Args:
        view: Current view state
        expanded: Show every field of each card, or only the collapsed summary

    Returns:
        A renderable for a rich Console or Live display
    """
    parts: List[RenderableType] = [Text(TITLE, style="bold", justify="center")]

    if view.phase == Phase.IDLE:
        if view.error_message:
            parts.append(Text(view.error_message, style="red"))
        parts.append(Text(f"{view.language.flag} {view.language.short}  Pick a photo to start."))
        return Group(*parts)

    if view.phase == Phase.CAPTURING:
        parts.append(Spinner("dots", text="Waiting for a photo..."))
        return Group(*parts)

    if view.phase == Phase.UPLOADING:
        parts.append(Spinner("dots", text="Uploading photo..."))
        return Group(*parts)

    for index, idea in enumerate(view.ideas[:MAX_IDEAS]):
        parts.append(render_idea(idea, index, expanded))

    if view.phase == Phase.ANALYZING:
        progress = f"{LOADING_MESSAGE} ({len(view.ideas)}/{MAX_IDEAS})"
        parts.append(Spinner("dots", text=progress))
    elif view.has_error:
        parts.append(render_error(view))

    return Group(*parts)
