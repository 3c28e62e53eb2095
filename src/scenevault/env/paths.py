from __future__ import annotations

from pathlib import Path

from scenevault.env.env import get_env, get_logging_env


# ---------------------------------------------------------------------
# Base directories (override-friendly, created on demand)
# ---------------------------------------------------------------------


def data_dir() -> Path:
    path = get_env().data_dir
    path.mkdir(parents=True, exist_ok=True)
    return path


def logs_dir() -> Path:
    path = get_logging_env().logs_dir
    path.mkdir(parents=True, exist_ok=True)
    return path


# ---------------------------------------------------------------------
# Log layout helpers (used by logger)
# ---------------------------------------------------------------------


def module_logs_dir(command: str) -> Path:
    """
    Base log directory for a CLI command (e.g. playlists, check).
    """
    path = logs_dir() / command
    path.mkdir(parents=True, exist_ok=True)
    return path


def exports_dir() -> Path:
    return data_dir() / "exports"


def out_file(name: str, out_dir: Path | None = None) -> Path:
    """
    Path to a named output file (exports). Defaults to <data>/exports.
    """
    base = Path(out_dir) if out_dir is not None else exports_dir()
    base.mkdir(parents=True, exist_ok=True)
    return base / name
