from __future__ import annotations

from pathlib import Path

"""Binary object storage for attachments.

Objects are addressed by their opaque storage path (`Attachment.file_path`)
and live under a root directory, one file per object.
"""

__all__ = [
    "ObjectStoreError",
    "LocalObjectStore",
]


class ObjectStoreError(Exception):
    pass


class LocalObjectStore:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        root = self.root.resolve()
        target = (root / path.lstrip("/")).resolve()
        if not target.is_relative_to(root):
            raise ObjectStoreError(f"object path escapes storage root: {path}")
        return target

    def download(self, path: str) -> bytes:
        """Read one stored object.

        Args:
            path: storage locator relative to the root (leading `/` ignored)

        Returns:
            The object's bytes.

        Raises:
            ObjectStoreError: missing object, unreadable file, or a locator
                that is malformed or points outside the root
        """
        try:
            target = self._resolve(path)
            return target.read_bytes()
        except FileNotFoundError as e:
            raise ObjectStoreError(f"object not found: {path}") from e
        except (OSError, ValueError) as e:
            raise ObjectStoreError(f"failed to read object {path!r}: {e}") from e
