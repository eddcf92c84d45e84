from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Protocol

from ..errors import PersistenceError

logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    def load(self, key: str) -> bytes | None: ...

    def save(self, key: str, blob: bytes) -> None: ...


class FileGateway:
    """One ``<key>.json`` file per collection under ``directory``."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> bytes | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with path.open("rb") as f:
                return f.read()
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise PersistenceError(key, str(e)) from e

    def save(self, key: str, blob: bytes) -> None:
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Write then rename so the file is either fully old or fully new
            fd, tmp = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.directory)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(blob)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise PersistenceError(key, str(e)) from e


class MemoryGateway:
    def __init__(self, blobs: Dict[str, bytes] | None = None):
        self.blobs: Dict[str, bytes] = dict(blobs or {})

    def load(self, key: str) -> bytes | None:
        return self.blobs.get(key)

    def save(self, key: str, blob: bytes) -> None:
        self.blobs[key] = blob
