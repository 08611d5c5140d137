"""Filesystem-backed local artifact cache."""
from __future__ import annotations

import logging
import os
import tempfile
from typing import Optional

logger = logging.getLogger(__name__)


class LocalStore:
    """Reads and writes cache entries addressed by slash-separated relative paths."""

    def __init__(self, root: str):
        self.root = os.path.abspath(os.path.expanduser(root))

    def absolute(self, relative_path: str) -> str:
        """Map a relative cache path onto the filesystem, refusing escapes from the root."""
        parts = [p for p in relative_path.replace("\\", "/").split("/") if p]
        if any(p in (".", "..") for p in parts):
            raise ValueError(f"Invalid cache path: {relative_path}")
        return os.path.join(self.root, *parts)

    def exists(self, relative_path: str) -> bool:
        return os.path.isfile(self.absolute(relative_path))

    def read_bytes(self, relative_path: str) -> Optional[bytes]:
        """Return the cached bytes, or None when absent."""
        path = self.absolute(relative_path)
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except FileNotFoundError:
            return None

    def write_bytes(self, relative_path: str, data: bytes) -> str:
        """Persist ``data`` atomically and return the absolute path.

        Raises:
            OSError: when the directory or file cannot be written.
        """
        path = self.absolute(relative_path)
        directory = os.path.dirname(path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".part-", dir=directory)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug("Cached %s (%d bytes)", relative_path, len(data))
        return path

