"""Text-injection backend using libxdo (X11).

This backend hands the whole string to libxdo's xdo_enter_text_window(),
which types it into the focused window and handles Shift sequencing
itself. Requires an X11 display (or XWayland for X11 clients).
"""

import ctypes
import ctypes.util
from ctypes import c_char_p, c_int, c_uint, c_ulong, c_void_p
from typing import Optional

from loguru import logger

from pasteclipboard.backends.base import (
    DisplayConnectionError,
    InjectionError,
    InjectionFailed,
)

# Window id 0 tells libxdo to target whatever currently has focus
CURRENTWINDOW = 0

DEFAULT_XDO_DELAY_US = 12000


class XdoNotFoundError(InjectionError):
    """Raised when libxdo is required but not installed."""

    pass


def find_libxdo() -> Optional[str]:
    """Return a loadable name for libxdo, or None if it is not installed."""
    path = ctypes.util.find_library("xdo")
    if path:
        return path
    for candidate in ("libxdo.so.3", "libxdo.so"):
        try:
            ctypes.CDLL(candidate)
            return candidate
        except OSError:
            continue
    return None


def load_libxdo() -> ctypes.CDLL:
    """Load libxdo and declare the signatures used by XdoKeyboard.

    Raises:
        XdoNotFoundError: If libxdo cannot be found or loaded
    """
    path = find_libxdo()
    if path is None:
        raise XdoNotFoundError(
            "libxdo is required for the xdo typing backend.\n\n"
            "Install libxdo:\n"
            "  - Debian/Ubuntu: sudo apt install libxdo3\n"
            "  - Arch Linux: sudo pacman -S xdotool\n"
            "  - Fedora: sudo dnf install libxdo\n\n"
            "Or use the uinput backend instead."
        )
    try:
        lib = ctypes.CDLL(path)
    except OSError as e:
        raise XdoNotFoundError(f"Failed to load libxdo from {path}: {e}") from e

    lib.xdo_new.argtypes = [c_char_p]
    lib.xdo_new.restype = c_void_p
    lib.xdo_free.argtypes = [c_void_p]
    lib.xdo_free.restype = None
    # int xdo_enter_text_window(const xdo_t *, Window, const char *, useconds_t)
    lib.xdo_enter_text_window.argtypes = [c_void_p, c_ulong, c_char_p, c_uint]
    lib.xdo_enter_text_window.restype = c_int
    return lib


class XdoKeyboard:
    """Keyboard backend using libxdo for X11.

    libxdo types the entire text in one call, pacing keystrokes with its
    own delay, so char_delay is not applicable.
    """

    def __init__(self, delay_us: int = DEFAULT_XDO_DELAY_US, lib=None):
        """Initialize the xdo keyboard backend.

        Args:
            delay_us: Delay in microseconds libxdo waits between keystrokes
            lib: Preloaded libxdo handle (loaded on demand if None)

        Raises:
            XdoNotFoundError: If libxdo is not installed
        """
        self.delay_us = delay_us
        self._lib = lib if lib is not None else load_libxdo()
        self._xdo: Optional[int] = None
        logger.debug("XdoKeyboard: libxdo loaded")

    @property
    def is_open(self) -> bool:
        return self._xdo is not None

    def open(self) -> None:
        """Connect to the X display named by $DISPLAY.

        Raises:
            DisplayConnectionError: If no display server is reachable
        """
        if self._xdo is not None:
            return
        handle = self._lib.xdo_new(None)
        if not handle:
            raise DisplayConnectionError(
                "Could not connect to the X display. Is DISPLAY set and the X "
                "server running?"
            )
        self._xdo = handle
        logger.debug("XdoKeyboard: connected to X display")

    def close(self) -> None:
        """Free the libxdo handle and its display connection."""
        if self._xdo is None:
            return
        handle, self._xdo = self._xdo, None
        self._lib.xdo_free(handle)
        logger.debug("XdoKeyboard: display connection closed")

    def __enter__(self) -> "XdoKeyboard":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def filter_text(self, text: str) -> str:
        """Keep ASCII characters, minus NUL which would end the C string."""
        return "".join(c for c in text if c.isascii() and c != "\0")

    def type_text(self, text: str) -> None:
        """Type the given text using libxdo.

        Args:
            text: The text to type

        Raises:
            InjectionFailed: If libxdo returns a nonzero status
        """
        if self._xdo is None:
            raise DisplayConnectionError("X display connection is not open")
        if not text:
            return

        logger.debug(f"XdoKeyboard: typing {len(text)} characters")
        status = self._lib.xdo_enter_text_window(
            self._xdo, CURRENTWINDOW, text.encode("ascii"), self.delay_us
        )
        if status != 0:
            raise InjectionFailed(status)

        logger.debug("XdoKeyboard: typing complete")
