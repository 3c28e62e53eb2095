from __future__ import annotations

from pathlib import Path
from typing import Optional, Set

INITIALIZED: bool = False
RUN_ID: Optional[str] = None
LOG_DIR: Optional[Path] = None
LOG_FILE_PATH: Optional[Path] = None

# Credentials seen this process; masked in every emitted record.
SECRETS: Set[str] = set()
