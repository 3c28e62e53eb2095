from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# ------------------------------------------------------------
# Paths
# ------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent

# ------------------------------------------------------------
# dotenv (read-only helper, bootstrap owns usage)
# ------------------------------------------------------------


def _load_dotenv(path: Path) -> bool:
    """
    Load a .env file into os.environ.
    - Silent when the file is missing
    - Never overrides existing os.environ
    """
    if not path.exists():
        return False
    return load_dotenv(path, override=False)


# ------------------------------------------------------------
# Errors / helpers
# ------------------------------------------------------------


class ConfigError(RuntimeError):
    pass


def _require(name: str) -> str:
    v = os.environ.get(name)
    if not v:
        raise ConfigError(f"Missing required environment variable: {name}")
    return v


def _as_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(v: str, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return default


def _as_float(v: str, default: float) -> float:
    try:
        return float(v)
    except Exception:
        return default


def _as_dir(name: str, default: Path) -> Path:
    raw = os.environ.get(name)
    return Path(raw).expanduser().resolve() if raw else default


# ------------------------------------------------------------
# Logging environment (SAFE ANYWHERE)
# ------------------------------------------------------------


@dataclass(frozen=True)
class LoggingEnvironment:
    log_level: str
    log_retention: int
    logs_dir: Path
    verbose: bool
    quiet: bool
    interactive: bool


def get_logging_env() -> LoggingEnvironment:
    log_level = os.environ.get("LOG_LEVEL", "INFO")
    log_retention = _as_int(os.environ.get("LOG_RETENTION", "30"), 30)

    verbose = _as_bool(os.environ.get("SCENEVAULT_VERBOSE", "0"))
    quiet = _as_bool(os.environ.get("SCENEVAULT_QUIET", "0"))

    # Progress bars replace console logging only on a real terminal.
    interactive = not quiet and sys.stdout.isatty()

    return LoggingEnvironment(
        log_level=log_level,
        log_retention=log_retention,
        logs_dir=_as_dir("SCENEVAULT_LOGS_DIR", PROJECT_ROOT / "logs"),
        verbose=verbose,
        quiet=quiet,
        interactive=interactive,
    )


# ------------------------------------------------------------
# Full runtime environment
# ------------------------------------------------------------

STORE_KINDS = ("json", "memory", "rest")


class Environment:
    def __init__(self):
        # Logging snapshot (immutable)
        self._logging = get_logging_env()

        # ---- OWNER / STORAGE ----
        self.user_id = os.environ.get("SCENEVAULT_USER_ID", "local").strip() or "local"
        self.command = os.environ.get("SCENEVAULT_COMMAND", "bootstrap")

        self.store_kind = os.environ.get("SCENEVAULT_STORE", "json").strip().lower()
        if self.store_kind not in STORE_KINDS:
            raise ConfigError(
                f"Unknown SCENEVAULT_STORE: {self.store_kind} "
                f"(expected one of: {', '.join(STORE_KINDS)})"
            )

        self.data_dir = _as_dir("SCENEVAULT_DATA_DIR", PROJECT_ROOT / "data")

        self.supabase_url = os.environ.get("SUPABASE_URL", "").rstrip("/")
        self.supabase_key = os.environ.get("SUPABASE_KEY", "")
        self.supabase_access_token = os.environ.get("SUPABASE_ACCESS_TOKEN", "")

        if self.store_kind == "rest":
            self.supabase_url = _require("SUPABASE_URL").rstrip("/")
            self.supabase_key = _require("SUPABASE_KEY")

        # ---- YOUTUBE API ----
        self.request_timeout = _as_int(os.environ.get("YT_REQUEST_TIMEOUT", "30"), 30)
        self.max_retries = _as_int(os.environ.get("YT_MAX_RETRIES", "3"), 3)
        self.backoff_base_sec = _as_float(
            os.environ.get("YT_BACKOFF_BASE_SEC", "1.0"), 1.0
        )

        # ---- SYNC / RECONCILIATION ----
        self.page_size = min(
            max(_as_int(os.environ.get("SCENEVAULT_PAGE_SIZE", "50"), 50), 1), 50
        )
        self.max_playlist_items = _as_int(
            os.environ.get("SCENEVAULT_MAX_PLAYLIST_ITEMS", "500"), 500
        )
        self.status_batch_size = min(
            max(_as_int(os.environ.get("SCENEVAULT_STATUS_BATCH_SIZE", "50"), 50), 1),
            50,
        )
        self.status_pacing_sec = (
            _as_int(os.environ.get("SCENEVAULT_STATUS_PACING_MS", "100"), 100) / 1000.0
        )

    @property
    def json_store_path(self) -> Path:
        return self.data_dir / f"scenevault_{self.user_id}.json"

    @property
    def settings_path(self) -> Path:
        return self.data_dir / "settings.json"

    def as_dict(self) -> dict:
        return {
            "Logging": {
                "log_level": self.log_level,
                "log_retention": self.log_retention,
                "logs_dir": str(self._logging.logs_dir),
                "verbose": self.verbose,
                "quiet": self.quiet,
            },
            "Storage": {
                "user_id": self.user_id,
                "store": self.store_kind,
                "data_dir": str(self.data_dir),
                "supabase_url": self.supabase_url or "(unset)",
                "supabase_key": "set" if self.supabase_key else "(unset)",
            },
            "API": {
                "request_timeout": self.request_timeout,
                "max_retries": self.max_retries,
                "backoff_base_sec": self.backoff_base_sec,
            },
            "Behavior": {
                "page_size": self.page_size,
                "max_playlist_items": self.max_playlist_items,
                "status_batch_size": self.status_batch_size,
                "status_pacing_sec": self.status_pacing_sec,
            },
        }

    # ---- logging passthrough ----
    @property
    def log_level(self) -> str:
        return self._logging.log_level

    @property
    def log_retention(self) -> int:
        return self._logging.log_retention

    @property
    def verbose(self) -> bool:
        return self._logging.verbose

    @property
    def quiet(self) -> bool:
        return self._logging.quiet

    @property
    def interactive(self) -> bool:
        return self._logging.interactive


_ENV: Optional[Environment] = None


def reset_env_caches() -> None:
    """Invalidate cached views of environment variables."""
    global _ENV
    _ENV = None


def get_env() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = Environment()
    return _ENV
