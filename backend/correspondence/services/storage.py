"""
Filesystem blob store for uploaded attachments.
"""
from __future__ import annotations

import os
from pathlib import Path

from correspondence.core.config import settings
from correspondence.core.logger import logger

ATTACHMENTS_NAMESPACE = "public/attachments"


class LocalBlobStorage:
    """Stores blobs as ``<root>/<namespace>/<filename>``; writing the same name twice overwrites."""

    def __init__(self, root: str | os.PathLike):
        self.root = Path(root)

    def path(self, namespace: str, filename: str) -> Path:
        if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
            raise ValueError(f"Invalid blob filename: {filename!r}")
        return self.root / namespace / filename

    def store(self, data: bytes, namespace: str, filename: str) -> Path:
        target = self.path(namespace, filename)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data)
        logger.debug(f"Stored blob {target} ({len(data)} bytes)")
        return target

    def delete(self, namespace: str, filename: str) -> bool:
        target = self.path(namespace, filename)
        if not target.exists():
            return False
        target.unlink()
        return True


_storage: LocalBlobStorage | None = None


def get_storage() -> LocalBlobStorage:
    """Dependency: the process-wide blob store rooted at ``settings.storage_root``."""
    global _storage
    if _storage is None:
        _storage = LocalBlobStorage(settings.storage_root)
    return _storage
