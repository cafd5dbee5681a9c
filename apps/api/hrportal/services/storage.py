"""
Blob storage sink for uploaded and generated files.

Anything with ``put(path, data, content_type) -> url`` can be used. The
bundled ``LocalDirectoryStorage`` writes under a base directory and returns
URLs under a base URL, which is enough for development and tests.
"""

import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class BlobStorage(Protocol):
    def put(self, path: str, data: bytes, content_type: str) -> str:
        ...


class LocalDirectoryStorage:

    def __init__(self, base_dir: str, base_url: str = "/files"):
        self.base_dir = Path(base_dir).resolve()
        self.base_url = base_url.rstrip("/")

    def put(self, path: str, data: bytes, content_type: str) -> str:
        target = (self.base_dir / path).resolve()
        # prevent path traversal out of base_dir
        if not str(target).startswith(str(self.base_dir)):
            raise ValueError(f"Invalid storage path: {path}")

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Stored %d bytes (%s) at %s", len(data), content_type, target)
        return f"{self.base_url}/{path}"
