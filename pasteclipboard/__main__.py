import argparse
import math
import sys
import time
from pathlib import Path
from typing import Callable

from loguru import logger

from pasteclipboard.backends import BackendChoice
from pasteclipboard.platform_detection import get_platform_info
from pasteclipboard.settings import (
    MAX_DELAY_SECONDS,
    load_settings,
    save_delay,
)
from pasteclipboard.typer import POLL_INTERVAL, TypingJob, TypingRequest, TypingResult
from pasteclipboard.utils import get_app_data_dir, pluralize

INVALID_DELAY_MESSAGE = f"Invalid delay (must be a number from 0–{MAX_DELAY_SECONDS})."


def get_log_file_path() -> Path:
    """Get the default path to the log file in the user's config directory."""
    config_dir = get_app_data_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / "pasteclipboard.log"


def configure_logging(log_file: Path | None = None, verbose: bool = False) -> Path:
    """Configure loguru to log to stderr and a rotating file.

    Args:
        log_file: Optional custom path to log file. If None, uses platform defaults.
        verbose: Show debug messages on stderr

    Returns:
        The path to the log file being used.
    """
    if log_file is None:
        log_file = get_log_file_path()
    else:
        # Ensure parent directory exists for custom log file
        log_file = Path(log_file).expanduser().resolve()
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")
    logger.add(
        log_file,
        rotation="10 MB",  # Rotate when file reaches 10 MB
        retention=3,  # Keep 3 old log files
        compression="zip",  # Compress rotated logs
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        backtrace=True,
        diagnose=True,
    )

    logger.info(f"Logging to file: {log_file}")
    return log_file


def parse_delay(value: str) -> int | None:
    """Parse a delay in whole seconds, or None if it is out of range."""
    try:
        delay = int(value.strip())
    except (ValueError, AttributeError):
        return None
    if 0 <= delay <= MAX_DELAY_SECONDS:
        return delay
    return None


def countdown_message(remaining: int) -> str:
    if remaining > 0:
        return f"Typing in {pluralize(remaining, 'second')}... focus the target window."
    return "Typing now..."


def run_job(
    job: TypingJob,
    on_status: Callable[[str], None] = print,
    poll_interval: float = POLL_INTERVAL,
) -> TypingResult:
    """Start a typing job and poll it until it reports a result.

    The countdown is tracked here, in the foreground; the worker only sleeps.
    """
    deadline = time.monotonic() + job.request.delay
    last_shown = None
    job.start()

    while True:
        result = job.poll()
        if result is not None:
            return result

        remaining = max(0, math.ceil(deadline - time.monotonic()))
        if remaining != last_shown:
            on_status(countdown_message(remaining))
            last_shown = remaining
        time.sleep(poll_interval)


def read_text(args: argparse.Namespace) -> str:
    if args.text is not None:
        return args.text
    if args.file is not None:
        return args.file.read_text(encoding="utf-8")
    return sys.stdin.read()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pasteclipboard",
        description="Type text into the focused window after a delay.",
    )
    parser.add_argument(
        "text",
        nargs="?",
        help="Text to type. Read from --file or stdin if omitted.",
    )
    parser.add_argument("--file", type=Path, help="Read the text to type from a file.")
    parser.add_argument(
        "--delay",
        help="Seconds to wait before typing (default: last used delay).",
    )
    parser.add_argument(
        "--backend",
        choices=[choice.value for choice in BackendChoice],
        help="Injection backend to use.",
    )
    parser.add_argument(
        "--settings-file",
        type=Path,
        help="Path to the settings TOML file.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug logging."
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.settings_file)
    configure_logging(settings.log_file, verbose=args.verbose)
    logger.debug(f"Platform: {get_platform_info()}")

    delay = settings.delay_seconds
    if args.delay is not None:
        delay = parse_delay(args.delay)
        if delay is None:
            print(INVALID_DELAY_MESSAGE, file=sys.stderr)
            return 2

    try:
        text = read_text(args)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Could not read input text: {e}", file=sys.stderr)
        return 2

    if args.delay is not None:
        settings = settings.model_copy(update={"delay_seconds": delay})
        try:
            save_delay(delay, args.settings_file)
        except OSError as e:
            logger.warning(f"Could not save settings: {e}")

    backend = BackendChoice(args.backend) if args.backend else settings.backend

    request = TypingRequest(
        text=text, delay=settings.delay_seconds, backend=backend
    )
    job = TypingJob(request, **settings.backend_options())

    try:
        result = run_job(job)
    except KeyboardInterrupt:
        # The worker cannot be stopped mid-pass; exiting kills the daemon thread
        logger.info("Interrupted before typing finished")
        return 130

    if result.ok:
        print("✓ Done typing.")
        return 0
    print(f"Typing failed: {result.reason}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
