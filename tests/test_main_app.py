"""Tests for the command line entry point."""

import logging

import pytest

import constants
from main_app import main


@pytest.fixture(autouse=True)
def reset_logging():
    """Removes the handlers main() installs on the level generator's logger."""
    yield
    logger = logging.getLogger(constants.LOGGER_NAMESPACE)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


class TestMain:
    """Tests for main()."""

    def test_prints_resolved_level(self, capsys):
        exit_code = main(["--width", "6", "--height", "4", "--seed", "3", "--workers", "1"])

        output = capsys.readouterr().out
        assert exit_code == 0
        assert "Seed: 3" in output
        assert "start" in output
        assert "goal" in output
        # One line per grid row, a blank line and the summary.
        assert len(output.strip().splitlines()) == 4 + 2

    def test_rooms_catalog_with_stable_ties(self, capsys):
        exit_code = main(["--width", "5", "--height", "5", "--seed", "8", "--catalog", "rooms", "--stable-ties"])

        assert exit_code == 0
        assert "room_" in capsys.readouterr().out

    @pytest.mark.parametrize(
        "argv",
        [
            ["--width", "1", "--height", "1"],
            ["--width", "0"],
            ["--attempts", "0"],
            ["--workers", "0"],
        ],
    )
    def test_invalid_settings(self, capsys, argv: list[str]):
        exit_code = main(argv)

        assert exit_code == 2
        assert "Invalid settings" in capsys.readouterr().err

    def test_writes_log_file(self, tmp_path):
        exit_code = main(["--width", "4", "--height", "3", "--seed", "1", "--log-dir", str(tmp_path)])

        assert exit_code == 0
        log_file = tmp_path / constants.LOG_FILE_NAME
        assert log_file.exists()
        assert "Starting level generation" in log_file.read_text(encoding="utf-8")
