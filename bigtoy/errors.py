"""
Error taxonomy for capture, upload and analysis.
"""

from typing import Optional

from bigtoy.constants import (
    EMPTY_RESULT_MESSAGE,
    NETWORK_MESSAGE,
    QUOTA_MESSAGE,
    TIMEOUT_MESSAGE,
)
from bigtoy.models.session import FailureKind


class BigToyError(Exception):
    """Base class for all application errors."""


class CaptureError(BigToyError):
    """The image could not be acquired from its source."""


class InvalidTransitionError(BigToyError):
    """A view-model or pipeline action is not allowed in the current state."""


class AnalysisError(BigToyError):
    """A terminal failure of an analysis session."""

    kind = FailureKind.REQUEST_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(AnalysisError):
    kind = FailureKind.NETWORK_ERROR

    def __init__(self, message: str = NETWORK_MESSAGE):
        super().__init__(message)


class RequestError(AnalysisError):
    kind = FailureKind.REQUEST_ERROR

    def __init__(self, status_code: int, message: Optional[str] = None):
        super().__init__(message or f"Analysis failed (HTTP {status_code})")
        self.status_code = status_code


class RateLimitedError(AnalysisError):
    kind = FailureKind.RATE_LIMITED

    def __init__(self, message: str = QUOTA_MESSAGE):
        super().__init__(message)


class EmptyResultError(AnalysisError):
    kind = FailureKind.EMPTY_RESULT

    def __init__(self, message: str = EMPTY_RESULT_MESSAGE):
        super().__init__(message)


class AnalysisTimeoutError(AnalysisError):
    kind = FailureKind.TIMEOUT

    def __init__(self, message: str = TIMEOUT_MESSAGE):
        super().__init__(message)


class UploadError(AnalysisError):
    """The object store rejected the image or is not configured."""

    kind = FailureKind.UPLOAD_ERROR
