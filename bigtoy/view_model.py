"""
Finite-state view model for the capture -> upload -> analyze -> results screens.

Every transition is a pure function returning a new ViewState; an action that
makes no sense in the current phase raises InvalidTransitionError.
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from bigtoy.errors import InvalidTransitionError
from bigtoy.models.idea import Idea, Language
from bigtoy.models.session import Completed, Failed, FailureKind, InProgress, SessionState


class Phase(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    UPLOADING = "uploading"
    ANALYZING = "analyzing"
    RESULTS = "results"


class ViewState(BaseModel):
    """Everything the presentation layer needs to draw one frame."""

    model_config = ConfigDict(frozen=True)

    phase: Phase = Phase.IDLE
    ideas: Tuple[Idea, ...] = ()
    error_message: Optional[str] = None
    failure_kind: Optional[FailureKind] = None
    image_url: Optional[str] = None
    language: Language = Language.EN

    @property
    def is_loading(self) -> bool:
        return self.phase in (Phase.UPLOADING, Phase.ANALYZING)

    @property
    def has_error(self) -> bool:
        return self.error_message is not None

    @property
    def can_retry(self) -> bool:
        return self.phase == Phase.RESULTS and self.image_url is not None


def _require(state: ViewState, action: str, *phases: Phase):
    if state.phase not in phases:
        raise InvalidTransitionError(f"Cannot {action} while {state.phase.value}")


def begin_capture(state: ViewState, language=None) -> ViewState:
    _require(state, "start a capture", Phase.IDLE, Phase.CAPTURING, Phase.RESULTS)
    return ViewState(
        phase=Phase.CAPTURING,
        language=state.language if language is None else Language.parse(language),
    )


def capture_failed(state: ViewState, message: str) -> ViewState:
    _require(state, "report a capture failure", Phase.CAPTURING)
    return state.model_copy(update={"phase": Phase.IDLE, "error_message": message})


def image_acquired(state: ViewState) -> ViewState:
    _require(state, "upload", Phase.CAPTURING)
    return state.model_copy(update={"phase": Phase.UPLOADING})


def upload_succeeded(state: ViewState, image_url: str) -> ViewState:
    _require(state, "analyze", Phase.UPLOADING)
    return state.model_copy(update={"phase": Phase.ANALYZING, "image_url": image_url, "ideas": ()})


def upload_failed(state: ViewState, message: str) -> ViewState:
    _require(state, "report an upload failure", Phase.UPLOADING)
    return state.model_copy(
        update={
            "phase": Phase.RESULTS,
            "error_message": message,
            "failure_kind": FailureKind.UPLOAD_ERROR,
        }
    )


def begin_analysis(state: ViewState, image_url: str, language=None) -> ViewState:
    """Analyze an image that is already hosted, skipping capture and upload."""
    _require(state, "analyze", Phase.IDLE, Phase.RESULTS)
    return ViewState(
        phase=Phase.ANALYZING,
        image_url=image_url,
        language=state.language if language is None else Language.parse(language),
    )


def apply_session_state(state: ViewState, session_state: SessionState) -> ViewState:
    """
    Fold a pipeline snapshot into the view.

    Snapshots that arrive outside the analyzing phase are stale and ignored.
    """
    if state.phase != Phase.ANALYZING:
        return state

    if isinstance(session_state, InProgress):
        return state.model_copy(update={"ideas": session_state.ideas})
    if isinstance(session_state, Completed):
        return state.model_copy(update={"phase": Phase.RESULTS, "ideas": session_state.ideas})
    if isinstance(session_state, Failed):
        return state.model_copy(
            update={
                "phase": Phase.RESULTS,
                "ideas": session_state.ideas,
                "error_message": session_state.message,
                "failure_kind": session_state.kind,
            }
        )
    return state


def begin_retry(state: ViewState) -> ViewState:
    if not state.can_retry:
        raise InvalidTransitionError("Cannot retry without a previously uploaded image")
    return state.model_copy(
        update={"phase": Phase.ANALYZING, "ideas": (), "error_message": None, "failure_kind": None}
    )


def retake(state: ViewState) -> ViewState:
    """Discard the cached image and go back to capturing."""
    _require(state, "retake", Phase.ANALYZING, Phase.RESULTS)
    return ViewState(phase=Phase.CAPTURING, language=state.language)


def go_back(state: ViewState) -> ViewState:
    """Leave the results screen; the error stays visible on the start screen."""
    _require(state, "go back", Phase.ANALYZING, Phase.RESULTS)
    return state.model_copy(update={"phase": Phase.IDLE, "ideas": ()})
