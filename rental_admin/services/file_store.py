import logging
import os
import re
import time
from pathlib import Path
from typing import Optional

from rental_admin.config import settings

logger = logging.getLogger(__name__)


class FileStoreError(Exception):
    """Raised when an upload cannot be written, found or removed."""


class LocalFileStore:
    """Uploaded images on local disk, addressed by their public URL path.

    Files live flat in ``root`` and are served as ``<url_prefix>/<name>``.
    """

    def __init__(self, root: Optional[str] = None, url_prefix: Optional[str] = None):
        self.root = Path(root or settings.UPLOAD_DIR)
        self.url_prefix = "/" + (url_prefix or settings.UPLOAD_URL_PREFIX).strip("/")

    def generate_name(self, original_name: str) -> str:
        # Browsers may send a full client path; only the base name is kept
        base = re.split(r"[\\/]", original_name or "")[-1]
        base = re.sub(r"\s+", "-", base.strip()) or "upload"
        name = f"{int(time.time() * 1000)}-{base}"
        counter = 1
        while (self.root / name).exists():
            name = f"{int(time.time() * 1000)}-{counter}-{base}"
            counter += 1
        return name

    def public_path(self, name: str) -> str:
        return f"{self.url_prefix}/{name}"

    def _resolve(self, public_path: str) -> Path:
        prefix = self.url_prefix + "/"
        if not public_path or not public_path.startswith(prefix):
            raise FileStoreError(f"{public_path!r} is not under {prefix}")
        name = public_path[len(prefix):]
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise FileStoreError(f"Invalid upload path {public_path!r}")
        return self.root / name

    def write(self, original_name: str, data: bytes) -> str:
        """Store ``data`` under a fresh name and return its public path."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            name = self.generate_name(original_name)
            (self.root / name).write_bytes(data)
        except OSError as e:
            raise FileStoreError(f"Could not write {original_name!r}: {e}") from e
        logger.debug("Wrote %d bytes to %s", len(data), name)
        return self.public_path(name)

    def exists(self, public_path: str) -> bool:
        try:
            return self._resolve(public_path).is_file()
        except FileStoreError:
            return False

    def delete(self, public_path: str) -> None:
        path = self._resolve(public_path)
        try:
            os.remove(path)
        except FileNotFoundError as e:
            raise FileStoreError(f"{public_path} does not exist") from e
        except OSError as e:
            raise FileStoreError(f"Could not delete {public_path}: {e}") from e


def get_file_store() -> LocalFileStore:
    return LocalFileStore()
