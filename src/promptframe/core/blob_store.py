"""File-backed blob storage for generated images.

Providers that return raw image bytes instead of hosted URLs (HuggingFace
inference) need somewhere durable to put them.  The blob store writes each
payload to ``blob_dir`` under a random identifier and hands out URLs under
``url_prefix``, which the API mounts as a static directory.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Store binary blobs as files and resolve them to served URLs.

    Attributes:
        blob_dir: Directory holding blob files.
        url_prefix: URL prefix under which ``blob_dir`` is served.
    """

    def __init__(self, blob_dir: Path, url_prefix: str = "/static/blobs"):
        self.blob_dir = Path(blob_dir)
        self.blob_dir.mkdir(parents=True, exist_ok=True)
        self.url_prefix = url_prefix.rstrip("/")

    def store(self, data: bytes, suffix: str = ".png") -> str:
        """Persist *data* and return its storage id.

        Args:
            data: Raw blob content.
            suffix: File extension, including the leading dot.

        Returns:
            Storage id (file name inside ``blob_dir``).
        """
        storage_id = f"{uuid.uuid4().hex}{suffix}"
        path = self.blob_dir / storage_id
        path.write_bytes(data)
        logger.debug("Stored blob %s (%d bytes)", storage_id, len(data))
        return storage_id

    def get_url(self, storage_id: str) -> str | None:
        """Return the public URL for *storage_id*, or None if the blob is missing.

        Ids containing path separators never resolve, so a URL cannot point
        outside ``blob_dir``.
        """
        if not storage_id or "/" in storage_id or "\\" in storage_id:
            return None
        if not (self.blob_dir / storage_id).is_file():
            return None
        return f"{self.url_prefix}/{storage_id}"
