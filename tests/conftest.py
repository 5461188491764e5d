"""Pytest configuration and fixtures."""

import os
from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch):
    """Keep PASTECLIPBOARD_* variables from the calling shell out of tests."""
    for name in list(os.environ):
        if name.upper().startswith("PASTECLIPBOARD_"):
            monkeypatch.delenv(name)


@pytest.fixture
def captured_logs():
    """Fixture to capture loguru logs."""
    log_stream = StringIO()
    handler_id = logger.add(log_stream, format="{message}")
    yield log_stream
    logger.remove(handler_id)


@pytest.fixture
def fake_uinput():
    """Patch evdev.UInput in the uinput backend and skip real sleeps.

    Yields the mocked UInput class; each instantiation returns the same
    device mock, available as ``fake_uinput.return_value``.
    """
    with patch(
        "pasteclipboard.backends.uinput_backend.UInput"
    ) as uinput_cls, patch("pasteclipboard.backends.uinput_backend.time.sleep"):
        uinput_cls.return_value = MagicMock(name="uinput_device")
        yield uinput_cls


@pytest.fixture
def fake_libxdo():
    """A stand-in for the ctypes libxdo handle."""
    lib = MagicMock(name="libxdo")
    lib.xdo_new.return_value = 0xDEADBEEF
    lib.xdo_enter_text_window.return_value = 0
    return lib
