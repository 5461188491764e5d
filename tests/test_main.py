"""Tests for the command-line front end."""

from unittest.mock import MagicMock, patch

import pytest
import toml

from pasteclipboard.__main__ import (
    INVALID_DELAY_MESSAGE,
    countdown_message,
    main,
    parse_delay,
    run_job,
)
from pasteclipboard.settings import load_settings
from pasteclipboard.typer import TypingRequest, TypingResult


class TestParseDelay:
    """Tests for delay validation done before the core is reached."""

    @pytest.mark.parametrize("value,expected", [("0", 0), ("3", 3), (" 86400 ", 86400)])
    def test_valid(self, value, expected):
        assert parse_delay(value) == expected

    @pytest.mark.parametrize("value", ["-1", "86401", "abc", "1.5", ""])
    def test_invalid(self, value):
        assert parse_delay(value) is None


class TestCountdownMessage:
    def test_plural(self):
        assert countdown_message(3) == "Typing in 3 seconds... focus the target window."

    def test_singular(self):
        assert countdown_message(1) == "Typing in 1 second... focus the target window."

    def test_now(self):
        assert countdown_message(0) == "Typing now..."


class FakeJob:
    """TypingJob stand-in that finishes after a number of polls."""

    def __init__(self, request, result, polls_before_done=0):
        self.request = request
        self.result = result
        self.polls_before_done = polls_before_done
        self.started = False

    def start(self):
        self.started = True

    def poll(self):
        if self.polls_before_done > 0:
            self.polls_before_done -= 1
            return None
        return self.result


class TestRunJob:
    """Tests for the foreground polling loop."""

    def test_returns_result(self):
        """Test that run_job starts the job and returns its result."""
        job = FakeJob(TypingRequest(text="a"), TypingResult.success(), polls_before_done=2)
        messages = []

        with patch("pasteclipboard.__main__.time.sleep"):
            result = run_job(job, on_status=messages.append)

        assert job.started
        assert result.ok
        assert messages == ["Typing now..."]

    def test_countdown_shown_in_foreground(self):
        """Test that the countdown is derived from the foreground clock."""
        job = FakeJob(
            TypingRequest(text="a", delay=2),
            TypingResult.failure("boom"),
            polls_before_done=3,
        )
        messages = []
        clock = iter([100.0, 100.0, 101.5, 102.0, 102.0])

        with patch("pasteclipboard.__main__.time.sleep"), patch(
            "pasteclipboard.__main__.time.monotonic", side_effect=lambda: next(clock)
        ):
            result = run_job(job, on_status=messages.append)

        assert result.reason == "boom"
        assert messages == [
            "Typing in 2 seconds... focus the target window.",
            "Typing in 1 second... focus the target window.",
            "Typing now...",
        ]


class TestMain:
    """Tests for main()."""

    @pytest.fixture(autouse=True)
    def isolated_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
        with patch("pasteclipboard.__main__.configure_logging"):
            yield tmp_path

    def test_invalid_delay_rejected(self, capsys):
        """Test that an out-of-range delay never reaches the core."""
        with patch("pasteclipboard.__main__.TypingJob") as job_cls:
            assert main(["--delay", "90000", "hello"]) == 2

        job_cls.assert_not_called()
        assert INVALID_DELAY_MESSAGE in capsys.readouterr().err

    def test_success(self, capsys, isolated_config):
        """Test a successful run prints the done message and saves the delay."""
        with patch(
            "pasteclipboard.__main__.run_job", return_value=TypingResult.success()
        ), patch("pasteclipboard.__main__.TypingJob") as job_cls:
            assert main(["--delay", "0", "--backend", "uinput", "Hi!"]) == 0

        request = job_cls.call_args.args[0]
        assert request.text == "Hi!"
        assert request.delay == 0
        assert request.backend == "uinput"
        assert "Done typing" in capsys.readouterr().out

        saved = load_settings(isolated_config / "config" / "pasteclipboard" / "settings.toml")
        assert saved.delay_seconds == 0

    def test_failure(self, capsys):
        """Test that a failure prints the reason and exits nonzero."""
        result = TypingResult.failure("Failed to create UInput device.")
        with patch("pasteclipboard.__main__.run_job", return_value=result), patch(
            "pasteclipboard.__main__.TypingJob", MagicMock()
        ):
            assert main(["--delay", "1", "abc"]) == 1

        assert "Typing failed: Failed to create UInput device." in capsys.readouterr().err

    def test_text_from_file(self, tmp_path):
        """Test that --file supplies the text."""
        text_file = tmp_path / "input.txt"
        text_file.write_text("from file\n")

        with patch(
            "pasteclipboard.__main__.run_job", return_value=TypingResult.success()
        ), patch("pasteclipboard.__main__.TypingJob") as job_cls:
            main(["--file", str(text_file)])

        request = job_cls.call_args.args[0]
        assert request.text == "from file\n"
        assert request.delay == 3

    def test_missing_file_reported(self, capsys, tmp_path):
        """Test that an unreadable --file gives a readable error, not a traceback."""
        with patch("pasteclipboard.__main__.TypingJob") as job_cls:
            code = main(["--delay", "0", "--file", str(tmp_path / "nope.txt")])

        assert code == 2
        job_cls.assert_not_called()
        assert "Could not read input text:" in capsys.readouterr().err

    def test_invalid_utf8_file_reported(self, capsys, tmp_path):
        """Test that a file that is not UTF-8 is reported and nothing is typed."""
        text_file = tmp_path / "input.txt"
        text_file.write_bytes(b"abc\xff\xfe")

        with patch("pasteclipboard.__main__.TypingJob") as job_cls:
            code = main(["--delay", "0", "--file", str(text_file)])

        assert code == 2
        job_cls.assert_not_called()
        assert "Could not read input text:" in capsys.readouterr().err

    def test_unreadable_input_does_not_save_delay(self, isolated_config):
        """Test that the delay is only remembered once the text was read."""
        main(["--delay", "9", "--file", str(isolated_config / "nope.txt")])

        assert not (isolated_config / "config" / "pasteclipboard" / "settings.toml").exists()

    def test_env_overrides_not_saved(self, isolated_config, monkeypatch):
        """Test that remembering the delay writes only delay_seconds."""
        monkeypatch.setenv("PASTECLIPBOARD_BACKEND", "xdo")
        monkeypatch.setenv("PASTECLIPBOARD_CHAR_DELAY", "0.5")

        with patch(
            "pasteclipboard.__main__.run_job", return_value=TypingResult.success()
        ), patch("pasteclipboard.__main__.TypingJob") as job_cls:
            assert main(["--delay", "5", "hi"]) == 0

        assert job_cls.call_args.args[0].backend == "xdo"
        saved = toml.load(isolated_config / "config" / "pasteclipboard" / "settings.toml")
        assert saved == {"delay_seconds": 5}
