"""Type text into the focused window through uinput or libxdo."""

__version__ = "0.1.0"
