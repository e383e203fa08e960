"""Whole-document JSON artifacts (current snapshot and historical series)."""

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import Any

from sentiment_index.core.logger import logger

DEFAULT_MODE = 0o644


def write_json_atomic(path: str | Path, data: Any) -> Path:
    """
    Replace ``path`` with ``data`` serialised as JSON.

    The document is written to a temporary file in the same directory and
    moved over the target with ``os.replace``, so a reader sees either the old
    document or the new one, never a partial write. A new file gets mode
    0644; an existing one keeps its mode.

    Args:
        path (str | Path): Destination file.
        data (Any): JSON-serialisable payload.

    Returns:
        Path: The destination path.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    # mkstemp creates 0600; keep the mode readers of the old document had
    mode = stat.S_IMODE(target.stat().st_mode) if target.exists() else DEFAULT_MODE
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    logger.info(f"write_json_atomic: saved {target}")
    return target


def read_json(path: str | Path) -> Any:
    """Load a JSON artifact. Raises FileNotFoundError when it does not exist."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
