"""Injection backends for typing text into the focused window.

This module provides a factory function to create the appropriate
injection backend based on the current platform and configuration.
"""

from enum import Enum
from typing import Union

from loguru import logger

from pasteclipboard.backends.base import (
    DeviceCreationError,
    DeviceFailure,
    DisplayConnectionError,
    EmissionError,
    InjectionBackend,
    InjectionError,
    InjectionFailed,
)
from pasteclipboard.backends.uinput_backend import DEFAULT_DEVICE_NAME, UInputKeyboard
from pasteclipboard.backends.xdo_backend import (
    DEFAULT_XDO_DELAY_US,
    XdoKeyboard,
    XdoNotFoundError,
)

__all__ = [
    "BackendChoice",
    "DeviceCreationError",
    "DeviceFailure",
    "DisplayConnectionError",
    "EmissionError",
    "InjectionBackend",
    "InjectionError",
    "InjectionFailed",
    "UInputKeyboard",
    "XdoKeyboard",
    "XdoNotFoundError",
    "create_backend",
]


class BackendChoice(str, Enum):
    """Which injection backend to use."""

    AUTO = "auto"
    UINPUT = "uinput"
    XDO = "xdo"


def create_backend(
    method: Union[str, BackendChoice] = BackendChoice.AUTO,
    char_delay: float = 0.02,
    settle_time: float = 0.2,
    xdo_delay_us: int = DEFAULT_XDO_DELAY_US,
    device_name: str = DEFAULT_DEVICE_NAME,
) -> Union[UInputKeyboard, XdoKeyboard]:
    """Create the injection backend for the requested method.

    Args:
        method: Backend selection method:
            - "auto": Automatically detect based on platform (default)
            - "uinput": Force the uinput virtual keyboard
            - "xdo": Force libxdo (X11 only)
        char_delay: Delay after each character (only used by uinput)
        settle_time: Delay after device creation (only used by uinput)
        xdo_delay_us: libxdo's delay between keystrokes in microseconds
        device_name: Name of the virtual device (only used by uinput)

    Returns:
        An unopened backend instance implementing the InjectionBackend protocol

    Raises:
        XdoNotFoundError: If xdo is required but libxdo is not installed
        ValueError: If an invalid method is specified
    """
    try:
        choice = BackendChoice(str(getattr(method, "value", method)).lower())
    except ValueError:
        raise ValueError(
            f"Invalid backend method: '{method}'. Valid options: auto, uinput, xdo"
        ) from None

    if choice == BackendChoice.AUTO:
        choice = _detect_backend()

    if choice == BackendChoice.XDO:
        logger.info("Using xdo text-injection backend")
        return XdoKeyboard(delay_us=xdo_delay_us)

    logger.info("Using uinput virtual keyboard backend")
    return UInputKeyboard(
        char_delay=char_delay, settle_time=settle_time, device_name=device_name
    )


def _detect_backend() -> BackendChoice:
    """Pick a backend for the current session.

    Detection priority:
    1. X11 with libxdo installed -> xdo
    2. Anything else (Wayland, console, no libxdo) -> uinput
    """
    from pasteclipboard.platform_detection import (
        get_display_server,
        is_x11,
        xdo_available,
    )

    if is_x11() and xdo_available():
        logger.debug("Auto-detected X11 session with libxdo available")
        return BackendChoice.XDO

    logger.debug(
        f"Auto-detected display server '{get_display_server()}', using uinput"
    )
    return BackendChoice.UINPUT
