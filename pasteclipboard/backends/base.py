"""Base protocol and errors for injection backends.

This module defines the protocol that both injection backends follow, and
the exception hierarchy the typing orchestrator turns into failure results.
"""

from enum import Enum
from typing import Protocol, runtime_checkable


class InjectionError(RuntimeError):
    """Base class for every failure raised by an injection backend."""

    pass


class DeviceFailure(Enum):
    """Why the virtual keyboard device could not be created."""

    MISSING_DRIVER = "missing-driver"
    PERMISSION_DENIED = "permission-denied"
    OTHER = "other"


class DeviceCreationError(InjectionError):
    """Raised when the uinput virtual keyboard cannot be created."""

    def __init__(self, message: str, reason: DeviceFailure = DeviceFailure.OTHER):
        super().__init__(message)
        self.reason = reason


class DisplayConnectionError(InjectionError, ConnectionError):
    """Raised when no X display server is reachable."""

    pass


class EmissionError(InjectionError):
    """Raised when writing a single input event fails mid-sequence."""

    pass


class InjectionFailed(InjectionError):
    """Raised when the host text-injection call returns a nonzero status."""

    def __init__(self, code: int):
        super().__init__(f"Text injection failed with status {code}")
        self.code = code


@runtime_checkable
class InjectionBackend(Protocol):
    """Protocol for keystroke injection implementations.

    A backend acquires its OS resources in open() and releases them in
    close(). It may be opened again after being closed. Used as a context
    manager, close() runs on every exit path.
    """

    def open(self) -> None:
        """Acquire the device handle or display connection."""
        ...

    def close(self) -> None:
        """Release OS resources. Safe to call when not open."""
        ...

    def filter_text(self, text: str) -> str:
        """Drop the characters this backend cannot carry.

        Args:
            text: The raw input text

        Returns:
            The text to hand to type_text()
        """
        ...

    def type_text(self, text: str) -> None:
        """Type the given text into the focused window.

        Args:
            text: Text already passed through filter_text()

        Raises:
            InjectionError: If any event could not be delivered
        """
        ...

    def __enter__(self) -> "InjectionBackend": ...

    def __exit__(self, exc_type, exc, tb) -> None: ...
