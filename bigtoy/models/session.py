"""
Immutable snapshots published by the analysis pipeline.
"""

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict

from bigtoy.models.idea import Idea


class FailureKind(str, Enum):
    NETWORK_ERROR = "network_error"
    REQUEST_ERROR = "request_error"
    RATE_LIMITED = "rate_limited"
    EMPTY_RESULT = "empty_result"
    TIMEOUT = "timeout"
    UPLOAD_ERROR = "upload_error"


class SessionStatus(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class SessionState(BaseModel):
    """Snapshot of a session: its status plus the ideas accumulated so far."""

    model_config = ConfigDict(frozen=True)

    status: SessionStatus
    ideas: Tuple[Idea, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.status in (SessionStatus.COMPLETED, SessionStatus.FAILED)


class Idle(SessionState):
    status: SessionStatus = SessionStatus.IDLE


class InProgress(SessionState):
    status: SessionStatus = SessionStatus.IN_PROGRESS


class Completed(SessionState):
    status: SessionStatus = SessionStatus.COMPLETED


class Failed(SessionState):
    """Terminal failure; ``ideas`` keeps whatever arrived before the error."""

    status: SessionStatus = SessionStatus.FAILED
    kind: FailureKind
    message: str
