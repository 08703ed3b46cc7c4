"""
Streaming ingestion pipeline: runs analysis sessions and publishes snapshots.
"""

import asyncio
import uuid
from typing import Callable, List, Optional

from bigtoy.constants import DEFAULT_ANALYSIS_TIMEOUT, UNEXPECTED_MESSAGE
from bigtoy.errors import (
    AnalysisError,
    AnalysisTimeoutError,
    EmptyResultError,
    InvalidTransitionError,
)
from bigtoy.models.idea import AnalysisRequest, Language
from bigtoy.models.session import Completed, Failed, Idle, InProgress, SessionState
from bigtoy.services.idea_client import IdeaStreamClient
from bigtoy.stream_parser import IdeaBatch, IdeaStreamParser
from bigtoy.utils.logger import logger

Listener = Callable[[SessionState], None]


class StreamSession:
    """Mutable state of one in-flight analyze request."""

    def __init__(self, request: AnalysisRequest):
        self.session_id = uuid.uuid4().hex[:8]
        self.request = request
        self.parser = IdeaStreamParser()
        self.ideas: IdeaBatch = ()
        self.produced_any = False
        self.error: Optional[AnalysisError] = None
        self.state: SessionState = Idle()
        self.task: Optional[asyncio.Task] = None

    @property
    def cancelled(self) -> bool:
        return self.task is not None and self.task.cancelled()

    def fail(self, error: AnalysisError):
        """Store the first terminal error; later ones are ignored."""
        if self.error is None:
            self.error = error

    def cancel(self):
        if self.task is not None and not self.task.done():
            logger.info(f"Cancelling session {self.session_id}")
            self.task.cancel()

    async def wait(self) -> SessionState:
        """
        Wait for the read loop to finish.

        Returns:
            The terminal state, or the last published state if the
            session was cancelled
        """
        if self.task is not None:
            await asyncio.wait({self.task})
            if not self.task.cancelled() and self.task.exception() is not None:
                raise self.task.exception()
        return self.state


class AnalysisPipeline:
    """Owns at most one live StreamSession and publishes its snapshots in order."""

    def __init__(self, client: IdeaStreamClient, timeout: float = DEFAULT_ANALYSIS_TIMEOUT):
        """
        Initialize the pipeline.

        Args:
            client: Client for the Idea-Generation Endpoint
            timeout: Wall-clock budget of one session in seconds
        """
        self.client = client
        self.timeout = timeout
        self._listeners: List[Listener] = []
        self._state: SessionState = Idle()
        self._session: Optional[StreamSession] = None
        self._last_request: Optional[AnalysisRequest] = None

    @property
    def state(self) -> SessionState:
        """Last published snapshot."""
        return self._state

    @property
    def session(self) -> Optional[StreamSession]:
        return self._session

    @property
    def last_request(self) -> Optional[AnalysisRequest]:
        return self._last_request

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for published snapshots.

        Args:
            listener: Called with every snapshot, in publication order

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start_analysis(self, user_id: str, image_url: str, language=Language.EN) -> StreamSession:
        """
        Start analysing an uploaded image, cancelling any live session.

        Must be called from a running event loop.

        Args:
            user_id: Stable id from the identity provider
            image_url: Public URL returned by the upload
            language: Language code; unknown values fall back to English

        Returns:
            The new session

        Raises:
            ValueError: Empty user id or non-absolute image URL
        """
        request = AnalysisRequest(user_id=user_id, image_url=image_url, language=language)
        return self._start(request)

    def retry(self) -> StreamSession:
        """Re-run the last request against the cached image URL."""
        if self._last_request is None:
            raise InvalidTransitionError("Nothing to retry: no image has been analysed yet")
        logger.info(f"Retrying analysis of {self._last_request.image_url}")
        return self._start(self._last_request)

    def retake(self):
        """Drop the cached image URL and go back to Idle."""
        self.cancel()
        self._last_request = None
        self._state = Idle()
        self._notify(self._state)

    def cancel(self):
        """Cancel the live session, if any, without publishing anything."""
        session, self._session = self._session, None
        if session is not None:
            session.cancel()

    def _start(self, request: AnalysisRequest) -> StreamSession:
        loop = asyncio.get_running_loop()
        self.cancel()

        session = StreamSession(request)
        self._session = session
        self._last_request = request
        logger.info(f"Starting session {session.session_id} for {request.image_url}")

        self._publish(session, InProgress())
        session.task = loop.create_task(self._run(session))
        return session

    async def _run(self, session: StreamSession):
        try:
            await asyncio.wait_for(self._read(session), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Session {session.session_id} exceeded {self.timeout}s")
            session.fail(AnalysisTimeoutError())
        except AnalysisError as e:
            session.fail(e)
        except Exception as e:
            logger.error(f"Unexpected error in session {session.session_id}: {e!r}")
            session.fail(AnalysisError(UNEXPECTED_MESSAGE))
            self._finish(session)
            raise
        self._finish(session)

    def _finish(self, session: StreamSession):
        """Publish the terminal snapshot and release the session."""
        if session.error is None and not session.produced_any:
            session.fail(EmptyResultError())

        if session.error is not None:
            logger.warning(
                f"Session {session.session_id} failed ({session.error.kind.value}) "
                f"with {len(session.ideas)} ideas: {session.error.message}"
            )
            final = Failed(kind=session.error.kind, message=session.error.message, ideas=session.ideas)
        else:
            logger.info(f"Session {session.session_id} completed with {len(session.ideas)} ideas")
            final = Completed(ideas=session.ideas)

        try:
            self._publish(session, final)
        finally:
            if self._session is session:
                self._session = None

    async def _read(self, session: StreamSession):
        async for chunk in self.client.stream_ideas(session.request):
            for batch in session.parser.feed(chunk):
                self._update(session, batch)
        for batch in session.parser.close():
            self._update(session, batch)

    def _update(self, session: StreamSession, batch: IdeaBatch):
        session.ideas = batch
        session.produced_any = session.produced_any or bool(batch)
        logger.debug(f"Session {session.session_id} now has {len(batch)} ideas")
        self._publish(session, InProgress(ideas=batch))

    def _publish(self, session: StreamSession, state: SessionState):
        if session.state.is_terminal:
            return
        session.state = state
        if session is not self._session:
            logger.debug(f"Dropping snapshot from superseded session {session.session_id}")
            return
        self._state = state
        self._notify(state)

    def _notify(self, state: SessionState):
        # Every listener sees the snapshot; the first listener error is raised afterwards
        error = None
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Listener failed on {state.status.value} snapshot: {e!r}")
                if error is None:
                    error = e
        if error is not None:
            raise error
