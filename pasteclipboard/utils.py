import os
from pathlib import Path


def get_app_data_dir() -> Path:
    """Get the application data directory for pasteclipboard.

    Returns:
        $XDG_CONFIG_HOME/pasteclipboard, or ~/.config/pasteclipboard
    """
    base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "pasteclipboard"


def pluralize(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"
