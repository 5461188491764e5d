from pathlib import Path
from typing import List, Optional

import toml
from loguru import logger
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from pasteclipboard.backends import BackendChoice
from pasteclipboard.backends.uinput_backend import DEFAULT_DEVICE_NAME
from pasteclipboard.backends.xdo_backend import DEFAULT_XDO_DELAY_US
from pasteclipboard.utils import get_app_data_dir

MAX_DELAY_SECONDS = 86400


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_prefix="PASTECLIPBOARD_")

    # Seconds to wait before typing starts, so the user can focus a window
    delay_seconds: int = Field(default=3, ge=0, le=MAX_DELAY_SECONDS)

    # Injection backend: auto, uinput or xdo
    backend: BackendChoice = BackendChoice.AUTO

    # uinput: delay after each character, and settle time after device creation
    char_delay: float = Field(default=0.02, ge=0)
    settle_time: float = Field(default=0.2, ge=0)
    device_name: str = DEFAULT_DEVICE_NAME

    # xdo: delay between keystrokes in microseconds
    xdo_delay_us: int = Field(default=DEFAULT_XDO_DELAY_US, ge=0)

    # Path to log file (uses platform defaults if not specified)
    log_file: Optional[Path] = None

    def backend_options(self) -> dict:
        """Keyword arguments for create_backend()."""
        return {
            "char_delay": self.char_delay,
            "settle_time": self.settle_time,
            "xdo_delay_us": self.xdo_delay_us,
            "device_name": self.device_name,
        }


def default_settings_locations() -> List[Path]:
    return [
        Path("settings.toml"),
        get_app_data_dir() / "settings.toml",
        Path("/etc/pasteclipboard/settings.toml"),
    ]


def user_settings_path() -> Path:
    """Where save_settings() writes when no path is given."""
    return get_app_data_dir() / "settings.toml"


def load_settings(settings_file: Path | None = None) -> Settings:
    """Loads settings from a TOML file, falling back to environment variables.

    If no settings_file is provided, searches in order:
    1. ./settings.toml (current directory)
    2. ~/.config/pasteclipboard/settings.toml (user config)
    3. /etc/pasteclipboard/settings.toml (system-wide)

    A file with invalid values is reported and ignored, so a bad saved delay
    never stops the application from starting.
    """
    if settings_file is None:
        for location in default_settings_locations():
            if location.is_file():
                settings_file = location
                break

    if not (settings_file and settings_file.is_file()):
        return Settings()

    try:
        data = toml.load(settings_file)
    except toml.TomlDecodeError as e:
        logger.warning(f"Ignoring malformed settings file {settings_file}: {e}")
        return Settings()

    try:
        settings = Settings(**data)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid settings in {settings_file}: {e}")
        return Settings()

    logger.debug(f"Loaded settings from {settings_file}")
    return settings


def save_settings(settings: Settings, settings_file: Path | None = None) -> Path:
    """Write settings to a TOML file, creating parent directories.

    Returns:
        The path written to.
    """
    if settings_file is None:
        settings_file = user_settings_path()

    data = settings.model_dump(mode="json", exclude_none=True)
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    with open(settings_file, "w") as f:
        toml.dump(data, f)

    logger.debug(f"Saved settings to {settings_file}")
    return settings_file


def save_delay(delay_seconds: int, settings_file: Path | None = None) -> Optional[Path]:
    """Remember the last used delay without touching any other setting.

    Only delay_seconds is updated in the target file; values that came from
    the environment or other settings files are never written back. A file
    that is not valid TOML is left alone.

    Returns:
        The path written to, or None if the file was left unchanged.
    """
    if settings_file is None:
        settings_file = user_settings_path()

    data = {}
    if settings_file.is_file():
        try:
            data = toml.load(settings_file)
        except toml.TomlDecodeError as e:
            logger.warning(f"Not saving delay to malformed settings file {settings_file}: {e}")
            return None

    data["delay_seconds"] = delay_seconds
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    with open(settings_file, "w") as f:
        toml.dump(data, f)

    logger.debug(f"Saved delay of {delay_seconds}s to {settings_file}")
    return settings_file
