"""Media storage: stores uploaded bytes and hands back a public reference
plus a deletion handle.

The only backend is a local directory served under ``/media``; anything
implementing ``MediaStorage`` can be put on ``app.state.storage`` instead.
"""

import logging
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from picslify.errors import NotFound, Upstream

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredMedia:
    public_id: str
    url: str


class MediaStorage(Protocol):
    def upload(self, data: bytes, filename: str) -> StoredMedia: ...

    def destroy(self, public_id: str) -> None:
        """Delete a stored object. Deleting a missing object is not an error."""
        ...


class LocalMediaStorage:
    def __init__(self, root: Path, base_url: str = "/media", folder: str = "uploads"):
        self.root = root
        self.base_url = base_url.rstrip("/")
        self.folder = folder

    def upload(self, data: bytes, filename: str) -> StoredMedia:
        ext = Path(filename).suffix.lower()
        public_id = f"{self.folder}/{secrets.token_hex(10)}{ext}"
        path = self.root / public_id
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise Upstream(f"Failed to store media: {e}") from e
        logger.debug("Stored %d bytes as %s", len(data), public_id)
        return StoredMedia(public_id=public_id, url=f"{self.base_url}/{public_id}")

    def destroy(self, public_id: str) -> None:
        try:
            self.resolve(public_id).unlink(missing_ok=True)
        except OSError as e:
            raise Upstream(f"Failed to delete media {public_id}: {e}") from e

    def resolve(self, public_id: str) -> Path:
        """Map a public id to a path inside the storage root."""
        root = self.root.resolve()
        path = (root / public_id).resolve()
        if not path.is_relative_to(root) or path == root:
            raise NotFound("Media not found")
        return path
