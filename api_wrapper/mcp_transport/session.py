"""Session registry for the SSE transport.

Each open stream owns one Session: a bounded outbound queue drained by the
stream loop, a close signal, and the handler tasks spawned for submissions
against it. The registry maps session ids to live sessions behind a single
lock that is only ever held for the dict operation itself.
"""

import asyncio
import threading
import uuid
from enum import Enum
from typing import Coroutine, Any

from structlog import get_logger

from .exceptions import SessionClosedError, SessionNotFoundError

logger = get_logger(__name__)

DEFAULT_QUEUE_SIZE = 10


class SessionState(str, Enum):
    """Lifecycle of a session."""

    open = "open"
    closing = "closing"
    closed = "closed"


class Session:
    """One client stream and its outbound message queue.

    Any number of producers may call ``send``; exactly one consumer (the
    stream loop) calls ``receive``.

    Attributes:
        id: Session identifier.
        state: Current lifecycle state.
    """

    def __init__(self, session_id: str, max_queue_size: int = DEFAULT_QUEUE_SIZE):
        self.id = session_id
        self.state = SessionState.open
        self._outbox: asyncio.Queue[str] = asyncio.Queue(maxsize=max_queue_size)
        self._closed = asyncio.Event()
        self._tasks: set[asyncio.Task] = set()

    @property
    def is_closed(self) -> bool:
        return self._closed.is_set()

    @property
    def pending_messages(self) -> int:
        return self._outbox.qsize()

    @property
    def active_tasks(self) -> int:
        return len(self._tasks)

    async def send(self, message: str) -> None:
        """Enqueue a message for the stream.

        Waits for room when the queue is full, but never past the session
        being closed.

        Raises:
            SessionNotFoundError: If the session is (or becomes) closed.
        """
        if self.is_closed:
            raise SessionNotFoundError(self.id)

        try:
            self._outbox.put_nowait(message)
            return
        except asyncio.QueueFull:
            pass

        putter = asyncio.ensure_future(self._outbox.put(message))
        closer = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({putter, closer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closer.cancel()
            if not putter.done():
                putter.cancel()

        if putter.done() and not putter.cancelled():
            return
        raise SessionNotFoundError(self.id)

    async def receive(self, timeout: float | None = None) -> str | None:
        """Wait for the next outbound message.

        Args:
            timeout: Seconds to wait before returning None (keepalive tick).

        Returns:
            The next message in enqueue order, or None on timeout.

        Raises:
            SessionClosedError: Once the session has been closed.
        """
        if self.is_closed:
            raise SessionClosedError(self.id)

        try:
            return self._outbox.get_nowait()
        except asyncio.QueueEmpty:
            pass

        getter = asyncio.ensure_future(self._outbox.get())
        closer = asyncio.ensure_future(self._closed.wait())
        try:
            done, _ = await asyncio.wait(
                {getter, closer},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            closer.cancel()
            if not getter.done():
                # Cancelling Queue.get leaves any pending item in the queue
                getter.cancel()

        if getter in done:
            return getter.result()
        if closer in done:
            raise SessionClosedError(self.id)
        return None

    def track(self, task: asyncio.Task) -> None:
        """Register a handler task so closing the session cancels it."""
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def close(self) -> None:
        """Signal the stream and cancel in-flight handler tasks. Idempotent."""
        if self.state is not SessionState.open:
            return
        self.state = SessionState.closing
        self._closed.set()
        for task in list(self._tasks):
            task.cancel()
        self.state = SessionState.closed


class SessionRegistry:
    """Table of live sessions keyed by id. Lives on ``app.state.sessions``."""

    def __init__(self, max_queue_size: int = DEFAULT_QUEUE_SIZE):
        self.max_queue_size = max_queue_size
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def _new_session_id(self) -> str:
        return uuid.uuid4().hex

    def open(self) -> Session:
        """Create and register a new session with a fresh id."""
        session_id = self._new_session_id()
        session = Session(session_id, max_queue_size=self.max_queue_size)
        with self._lock:
            while session_id in self._sessions:
                session_id = self._new_session_id()
                session.id = session_id
            self._sessions[session_id] = session
        logger.info("session_opened", session_id=session_id)
        return session

    def get(self, session_id: str) -> Session | None:
        """Return the live session for ``session_id``, or None."""
        with self._lock:
            return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        """Remove and close a session.

        Returns:
            True if a live session was closed, False if none matched.
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info("session_closed", session_id=session_id)
        return True

    def close_all(self) -> int:
        """Close every live session (server shutdown)."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()
            logger.info("session_closed", session_id=session.id, reason="shutdown")
        return len(sessions)

    async def send(self, session_id: str, message: str) -> None:
        """Deliver a message to a session's stream.

        Raises:
            SessionNotFoundError: If the session is unknown or closed.
        """
        session = self.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        await session.send(message)

    def spawn(self, session: Session, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        """Run a handler coroutine as a task owned by ``session``.

        Exceptions escaping the coroutine are logged and never reach the
        stream loop or other sessions.

        Raises:
            SessionNotFoundError: If the session is already closed.
        """
        if session.is_closed:
            coro.close()
            raise SessionNotFoundError(session.id)

        task = asyncio.create_task(coro)
        session.track(task)

        def _log_failure(done: asyncio.Task) -> None:
            if done.cancelled():
                return
            exc = done.exception()
            if exc is not None:
                logger.error(
                    "handler_task_failed",
                    session_id=session.id,
                    error=str(exc),
                    exc_info=exc,
                )

        task.add_done_callback(_log_failure)
        return task
