"""Platform detection utilities for PasteClipboard.

This module provides centralized functions for detecting:
- Display server (Wayland vs X11)
- Whether a uinput device node is present and writable
- Whether libxdo can be loaded
"""

import functools
import os

from loguru import logger

UINPUT_DEVNODE = "/dev/uinput"


@functools.lru_cache(maxsize=1)
def get_display_server() -> str:
    """Detect the current display server.

    Returns:
        'wayland', 'x11', or 'unknown'

    Priority order (most reliable first):
    1. XDG_SESSION_TYPE - Explicitly set by login manager
    2. WAYLAND_DISPLAY - Present when Wayland compositor is running
    3. DISPLAY - Present when X11 server is available
    """
    # Check XDG_SESSION_TYPE first (most reliable)
    session_type = os.environ.get("XDG_SESSION_TYPE", "").lower()
    if session_type == "wayland":
        return "wayland"
    if session_type == "x11":
        return "x11"

    # Fallback to checking display environment variables
    if os.environ.get("WAYLAND_DISPLAY"):
        return "wayland"

    if os.environ.get("DISPLAY"):
        return "x11"

    return "unknown"


def is_wayland() -> bool:
    """Check if running on Wayland."""
    return get_display_server() == "wayland"


def is_x11() -> bool:
    """Check if running on X11."""
    return get_display_server() == "x11"


def uinput_available(devnode: str = UINPUT_DEVNODE) -> bool:
    """Check whether the uinput device node exists and is writable.

    Not cached: permissions can change when a udev rule is installed.
    """
    if not os.path.exists(devnode):
        logger.debug(f"{devnode} does not exist (is the uinput module loaded?)")
        return False
    if not os.access(devnode, os.W_OK):
        logger.debug(f"{devnode} is not writable by this user")
        return False
    return True


@functools.lru_cache(maxsize=1)
def xdo_available() -> bool:
    """Check whether libxdo can be located."""
    from pasteclipboard.backends.xdo_backend import find_libxdo

    return find_libxdo() is not None


def get_platform_info() -> dict:
    """Get a summary of platform detection results.

    Useful for debugging and logging.
    """
    return {
        "display_server": get_display_server(),
        "is_wayland": is_wayland(),
        "is_x11": is_x11(),
        "uinput_available": uinput_available(),
        "xdo_available": xdo_available(),
    }


def clear_cache() -> None:
    """Clear all cached detection results.

    Useful for testing or if the environment changes.
    """
    get_display_server.cache_clear()
    xdo_available.cache_clear()
