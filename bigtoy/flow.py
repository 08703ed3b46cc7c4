"""
Capture -> upload -> analyze orchestration behind the results screen.
"""

from typing import Callable, List, Optional

from bigtoy import view_model
from bigtoy.capture import ImageSource
from bigtoy.errors import CaptureError, UploadError
from bigtoy.models.idea import Language
from bigtoy.models.session import SessionState
from bigtoy.pipeline import AnalysisPipeline
from bigtoy.services.upload_service import UploadService
from bigtoy.utils.logger import logger
from bigtoy.view_model import ViewState

ViewListener = Callable[[ViewState], None]


class CaptureFlow:
    """Drives the view model from user actions and pipeline snapshots."""

    def __init__(self, upload_service: UploadService, pipeline: AnalysisPipeline, language=Language.EN):
        """
        Initialize the flow.

        Args:
            upload_service: Upload adapter for the object store
            pipeline: Analysis pipeline
            language: Language used until the user picks another one
        """
        self.upload_service = upload_service
        self.pipeline = pipeline
        self._view = ViewState(language=Language.parse(language))
        self._listeners: List[ViewListener] = []
        self.pipeline.subscribe(self._on_session_state)

    @property
    def view(self) -> ViewState:
        return self._view

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def capture_and_analyze(self, source: ImageSource, user_id: str, language=None) -> ViewState:
        """
        Acquire an image, upload it and stream ideas for it.

        Args:
            source: Where the photo comes from
            user_id: Stable id from the identity provider
            language: Language code, or None to keep the current one

        Returns:
            The view once the session has finished
        """
        if not user_id:
            raise ValueError("User ID is missing")

        self.pipeline.cancel()
        self._set(view_model.begin_capture(self._view, language))

        try:
            image = await source.acquire()
        except CaptureError as e:
            logger.warning(f"Capture failed: {e}")
            self._set(view_model.capture_failed(self._view, str(e)))
            return self._view
        self._set(view_model.image_acquired(self._view))

        try:
            image_url = await self.upload_service.upload(image)
        except UploadError as e:
            self._set(view_model.upload_failed(self._view, e.message))
            return self._view
        self._set(view_model.upload_succeeded(self._view, image_url))

        return await self._analyze(user_id)

    async def analyze_url(self, image_url: str, user_id: str, language=None) -> ViewState:
        """Stream ideas for an image that is already hosted."""
        self.pipeline.cancel()
        self._set(view_model.begin_analysis(self._view, image_url, language))
        return await self._analyze(user_id)

    async def retry(self) -> ViewState:
        """Re-run the analysis against the cached image URL."""
        self._set(view_model.begin_retry(self._view))
        session = self.pipeline.retry()
        await session.wait()
        return self._view

    def retake(self) -> ViewState:
        """Forget the uploaded image and return to capturing."""
        self.pipeline.retake()
        self._set(view_model.retake(self._view))
        return self._view

    def back(self) -> ViewState:
        """Leave the results screen, cancelling any analysis in flight."""
        self.pipeline.cancel()
        self._set(view_model.go_back(self._view))
        return self._view

    async def _analyze(self, user_id: str) -> ViewState:
        try:
            session = self.pipeline.start_analysis(user_id, self._view.image_url, self._view.language)
        except ValueError as e:
            logger.error(f"Invalid analysis request: {e}")
            self._set(self._view.model_copy(update={"phase": view_model.Phase.IDLE, "error_message": str(e)}))
            raise
        await session.wait()
        return self._view

    def _on_session_state(self, session_state: SessionState):
        self._set(view_model.apply_session_state(self._view, session_state))

    def _set(self, view: ViewState):
        if view == self._view:
            return
        self._view = view
        for listener in list(self._listeners):
            listener(view)
