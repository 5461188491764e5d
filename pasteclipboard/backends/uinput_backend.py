"""Virtual keyboard backend using uinput.

This backend creates a synthetic keyboard through /dev/uinput with
python-evdev and writes raw press/release/sync events. It works on X11,
Wayland and the console alike, but needs the uinput kernel module and
write access to /dev/uinput.

Only ASCII text in SUPPORTED_CHARS can be typed. Key codes assume a US
layout on the receiving side.
"""

import errno
import time
from typing import Optional

from evdev import UInput, UInputError, ecodes
from loguru import logger

from pasteclipboard.backends.base import (
    DeviceCreationError,
    DeviceFailure,
    EmissionError,
)
from pasteclipboard.keymap import SHIFT, UNSUPPORTED, KeySpec, map_char, required_keys

DEFAULT_DEVICE_NAME = "PasteClipboard-Virtual-Keyboard"

_MISSING_DRIVER_ERRNOS = {errno.ENOENT, errno.ENODEV, errno.ENXIO}
_PERMISSION_ERRNOS = {errno.EACCES, errno.EPERM}


def classify_device_error(exc: Exception) -> DeviceFailure:
    """Work out why UInput creation failed.

    python-evdev reports a missing or unwritable device node as UInputError
    with a message, and lower-level failures as OSError with an errno.
    """
    if isinstance(exc, PermissionError):
        return DeviceFailure.PERMISSION_DENIED
    if isinstance(exc, OSError) and exc.errno is not None:
        if exc.errno in _MISSING_DRIVER_ERRNOS:
            return DeviceFailure.MISSING_DRIVER
        if exc.errno in _PERMISSION_ERRNOS:
            return DeviceFailure.PERMISSION_DENIED
        return DeviceFailure.OTHER

    message = str(exc).lower()
    if "does not exist" in message or "not a character device" in message:
        return DeviceFailure.MISSING_DRIVER
    if "cannot be opened" in message or "permission" in message:
        return DeviceFailure.PERMISSION_DENIED
    return DeviceFailure.OTHER


_FAILURE_MESSAGES = {
    DeviceFailure.MISSING_DRIVER: (
        "Failed to create UInput device. Is the 'uinput' kernel module loaded?\n"
        "Load it with: sudo modprobe uinput"
    ),
    DeviceFailure.PERMISSION_DENIED: (
        "Failed to create UInput device. Do you have permissions for /dev/uinput?\n"
        "Add your user to the 'input' group or install a udev rule granting "
        "write access to /dev/uinput."
    ),
    DeviceFailure.OTHER: "Failed to create UInput device.",
}


class UInputKeyboard:
    """Keyboard backend using a uinput virtual device.

    Each character becomes an optional Shift press, a key press and release,
    and an optional Shift release, every state change followed by a sync
    report. A short delay after each character keeps slower consumers from
    dropping events.
    """

    def __init__(
        self,
        char_delay: float = 0.02,
        settle_time: float = 0.2,
        device_name: str = DEFAULT_DEVICE_NAME,
    ):
        """Initialize the uinput keyboard backend.

        Args:
            char_delay: Delay in seconds after each typed character
            settle_time: Delay in seconds after device creation so the OS
                can register the new device before events arrive
            device_name: Name the virtual device is registered under
        """
        self.char_delay = char_delay
        self.settle_time = settle_time
        self.device_name = device_name
        self._device: Optional[UInput] = None

    @property
    def is_open(self) -> bool:
        return self._device is not None

    def open(self) -> None:
        """Create the virtual keyboard with every supported key enabled.

        Raises:
            DeviceCreationError: If the device cannot be created
        """
        if self._device is not None:
            return

        keys = sorted(required_keys())
        try:
            self._device = UInput({ecodes.EV_KEY: keys}, name=self.device_name)
        except (UInputError, OSError) as e:
            reason = classify_device_error(e)
            logger.error(f"UInputKeyboard: device creation failed ({reason.value}): {e}")
            raise DeviceCreationError(_FAILURE_MESSAGES[reason], reason) from e

        logger.debug(
            f"UInputKeyboard: created '{self.device_name}' with {len(keys)} keys"
        )
        if self.settle_time > 0:
            time.sleep(self.settle_time)

    def close(self) -> None:
        """Destroy the virtual keyboard."""
        if self._device is None:
            return
        device, self._device = self._device, None
        try:
            device.close()
            logger.debug("UInputKeyboard: device closed")
        except OSError as e:
            logger.warning(f"UInputKeyboard: error closing device: {e}")

    def __enter__(self) -> "UInputKeyboard":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def filter_text(self, text: str) -> str:
        """Keep ASCII characters only."""
        return "".join(c for c in text if c.isascii())

    def inject(self, spec: KeySpec, pressed: bool) -> None:
        """Write one key state change followed by a sync report.

        Args:
            spec: The key to change. Its shift flag is ignored here.
            pressed: True for press, False for release

        Raises:
            EmissionError: If the device is closed or the write fails
        """
        if self._device is None:
            raise EmissionError("Virtual keyboard is not open")
        try:
            self._device.write(ecodes.EV_KEY, spec.key, 1 if pressed else 0)
            self._device.syn()
        except OSError as e:
            raise EmissionError(f"Failed to write key event: {e}") from e

    def type_char(self, spec: KeySpec) -> None:
        """Tap one key, holding Shift around it when required."""
        if spec.shift:
            self.inject(SHIFT, True)
        self.inject(spec, True)
        self.inject(spec, False)
        if spec.shift:
            self.inject(SHIFT, False)

    def type_text(self, text: str) -> None:
        """Type the given text one key at a time.

        Characters without a key mapping are skipped.

        Args:
            text: The text to type

        Raises:
            EmissionError: If an event write fails. Characters before the
                failing one have already been typed.
        """
        logger.debug(f"UInputKeyboard: typing {len(text)} characters")

        for char in text:
            spec = map_char(char)
            if spec == UNSUPPORTED:
                continue
            self.type_char(spec)
            if self.char_delay > 0:
                time.sleep(self.char_delay)

        logger.debug("UInputKeyboard: typing complete")
