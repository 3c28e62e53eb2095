import os
import subprocess
import sys
from pathlib import Path

import pytest

SRC = Path(__file__).resolve().parent.parent / "src"


def _run(*args):
    env = {**os.environ, "PYTHONPATH": str(SRC)}
    return subprocess.run(
        [sys.executable, "-m", "scenevault", *args],
        capture_output=True,
        text=True,
        env=env,
    )


@pytest.mark.parametrize(
    "args",
    [
        ("--help",),
        ("playlists", "--help"),
        ("check", "--help"),
        ("scenes", "--help"),
        ("export", "--help"),
        ("settings", "--help"),
    ],
)
def test_help_runs(args):
    result = _run(*args)
    assert result.returncode == 0
    assert "usage" in result.stdout.lower()


def test_help_subcommand_runs():
    result = _run("help", "playlists", "import")
    assert result.returncode == 0
    assert "list=" in result.stdout


def test_unknown_command_is_usage_error():
    result = _run("frobnicate")
    assert result.returncode == 2
