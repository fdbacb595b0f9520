"""
FILE: tasker/core/atomic.py
PURPOSE: Atomic file writes (temp file in the same directory, then rename)
EXPORTS:
  - atomic_write(path, data) -> None
DEPENDENCIES:
  - os, tempfile, pathlib (stdlib)
  - loguru (debug logging)
NOTES:
  - Sole write path for config, project metadata, task and idea files
  - os.replace is atomic on a single filesystem: readers see old or new
    content, never a partial write
  - On failure the temp file is removed and the destination is untouched
"""

import os
import tempfile
from pathlib import Path
from typing import Union

from loguru import logger


def atomic_write(path: Union[str, Path], data: Union[str, bytes]) -> None:
    """
    Write data to path atomically.

    Args:
        path: Destination file
        data: Text (written as UTF-8) or bytes

    Raises:
        OSError: If the directory cannot be created or the write/rename fails
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = data.encode("utf-8") if isinstance(data, str) else data

    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp, 0o644)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    logger.debug("Wrote {} ({} bytes)", path, len(payload))
