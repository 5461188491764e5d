"""Typing orchestrator.

type_text() runs one typing pass over a string with an injection backend.
TypingJob runs a TypingRequest on a single background worker and hands the
result back through a one-slot queue that the foreground polls without
blocking.
"""

import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from loguru import logger

from pasteclipboard.backends import (
    BackendChoice,
    InjectionBackend,
    InjectionError,
    create_backend,
)

# How often the foreground checks for a finished job, in seconds
POLL_INTERVAL = 0.1


@dataclass(frozen=True)
class TypingRequest:
    """One user-triggered typing action."""

    text: str
    delay: float = 0
    backend: Union[str, BackendChoice] = BackendChoice.AUTO


@dataclass(frozen=True)
class TypingResult:
    """Terminal outcome of a TypingRequest."""

    ok: bool
    reason: Optional[str] = None

    @classmethod
    def success(cls) -> "TypingResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: str) -> "TypingResult":
        return cls(ok=False, reason=reason)


def type_text(
    text: str, delay_before_start: float, backend: InjectionBackend
) -> TypingResult:
    """Type text with the given backend and report a single result.

    The backend is opened for the pass and always closed afterwards. The
    first error aborts the pass; characters already typed stay typed.

    Args:
        text: Arbitrary input text. Characters the backend cannot carry are
            dropped silently.
        delay_before_start: Pre-typing delay in seconds. Informational only;
            the caller's scheduling layer performs the wait.
        backend: An unopened injection backend

    Returns:
        TypingResult.success() or TypingResult.failure(reason)
    """
    filtered = backend.filter_text(text)
    dropped = len(text) - len(filtered)
    if dropped:
        # TODO: surface dropped characters to the user instead of only logging
        logger.warning(f"Skipping {dropped} character(s) the backend cannot type")

    logger.info(
        f"Typing {len(filtered)} characters with {type(backend).__name__} "
        f"(requested after {delay_before_start}s delay)"
    )

    try:
        with backend:
            backend.type_text(filtered)
    except InjectionError as e:
        logger.error(f"Typing failed: {e}")
        return TypingResult.failure(str(e))

    logger.info("Typing complete")
    return TypingResult.success()


class TypingJob:
    """Runs one TypingRequest on a background worker thread.

    The worker waits out the request delay, builds and owns the backend,
    types, and sends exactly one TypingResult. The foreground calls poll()
    until it gets the result. There is no cancellation.
    """

    def __init__(
        self,
        request: TypingRequest,
        backend_factory: Callable[..., InjectionBackend] = create_backend,
        **backend_options,
    ):
        """Initialize the job.

        Args:
            request: The typing request to run
            backend_factory: Called in the worker as
                backend_factory(request.backend, **backend_options)
            **backend_options: Extra keyword arguments for the factory
        """
        self.request = request
        self._backend_factory = backend_factory
        self._backend_options = backend_options
        self._results: "queue.Queue[TypingResult]" = queue.Queue(maxsize=1)
        self._thread: Optional[threading.Thread] = None
        self._done = False

    @property
    def started(self) -> bool:
        return self._thread is not None

    @property
    def done(self) -> bool:
        """True once poll() has returned the result."""
        return self._done

    def start(self) -> None:
        """Start the worker thread.

        Raises:
            RuntimeError: If the job was already started
        """
        if self._thread is not None:
            raise RuntimeError("Typing job already started")
        self._thread = threading.Thread(
            target=self._run, name="typing-worker", daemon=True
        )
        self._thread.start()

    def poll(self) -> Optional[TypingResult]:
        """Return the result if the worker has finished, without blocking.

        The result is delivered once; later calls return None.
        """
        if self._done:
            return None
        try:
            result = self._results.get_nowait()
        except queue.Empty:
            return None
        self._done = True
        return result

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        """Worker body. Sends exactly one result."""
        request = self.request
        try:
            if request.delay > 0:
                logger.debug(f"Waiting {request.delay}s before typing")
                time.sleep(request.delay)
            backend = self._backend_factory(request.backend, **self._backend_options)
            result = type_text(request.text, request.delay, backend)
        except Exception as e:
            logger.exception(f"Typing job failed: {e}")
            result = TypingResult.failure(str(e) or type(e).__name__)
        self._results.put_nowait(result)
