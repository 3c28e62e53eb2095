from __future__ import annotations

from pathlib import Path
from typing import Optional


def enforce_retention(log_dir: Path, keep: int, protect: Optional[Path] = None) -> int:
    """
    Keep the newest `keep` run logs of one command directory.

    `protect` (the log about to be written) is never removed. Returns the
    number of files deleted; a file that cannot be removed is left behind.
    """
    if keep <= 0 or not log_dir.exists():
        return 0

    runs = sorted(
        (p for p in log_dir.glob("*.log") if p != protect),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    removed = 0
    for old in runs[keep:]:
        try:
            old.unlink()
            removed += 1
        except OSError:
            continue
    return removed
