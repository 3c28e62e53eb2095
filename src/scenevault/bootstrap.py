"""bootstrap.py

Process bootstrap for SceneVault.

Rules:
1) Only bootstrap is allowed to *mutate* os.environ for shared run context.
2) Call bootstrap_base_env() once at the true entrypoint.
3) Call bootstrap_run_context() after argparse parsing, before init_logging().
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

from scenevault.env import PROJECT_ROOT, _load_dotenv, reset_env_caches


_BOOTSTRAPPED = False


def bootstrap_base_env(env_file: str | Path | None = None) -> None:
    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return

    if env_file is None:
        env_file = os.environ.get("SCENEVAULT_ENV_FILE") or PROJECT_ROOT / ".env"

    _load_dotenv(Path(env_file))

    os.environ.setdefault(
        "SCENEVAULT_RUN_ID",
        datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
    )

    reset_env_caches()
    _BOOTSTRAPPED = True


def bootstrap_run_context(
    *,
    command: str,
    verbose: bool | None = None,
    quiet: bool | None = None,
    store: str | None = None,
    user_id: str | None = None,
) -> None:
    """Establish run-scoped context used by logging + stages."""

    os.environ["SCENEVAULT_COMMAND"] = command

    if verbose is not None:
        os.environ["SCENEVAULT_VERBOSE"] = "1" if verbose else "0"
    if quiet is not None:
        os.environ["SCENEVAULT_QUIET"] = "1" if quiet else "0"
    if store:
        os.environ["SCENEVAULT_STORE"] = store
    if user_id:
        os.environ["SCENEVAULT_USER_ID"] = user_id

    # Context changes must invalidate cached env views.
    reset_env_caches()
