import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from rental_admin.services.activity_log import ActivityLog
from rental_admin.services.file_store import FileStoreError, LocalFileStore

logger = logging.getLogger(__name__)


@dataclass
class NewUpload:
    filename: str
    content: bytes


@dataclass
class ImageSetResult:
    images: List[str]
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    uploaded: List[str] = field(default_factory=list)


def plan_reconciliation(
    stored: List[str], kept: Iterable[str]
) -> Tuple[List[str], List[str]]:
    """Split an edit into the images that survive and the ones to remove.

    ``kept`` keeps the client's order; duplicates and paths the property never
    had are dropped. Returns ``(kept, to_delete)`` where ``to_delete`` is every
    stored path missing from ``kept``, in stored order.
    """
    stored_set = set(stored)
    clean: List[str] = []
    seen = set()
    for path in kept:
        if path in stored_set and path not in seen:
            clean.append(path)
            seen.add(path)
    to_delete = [path for path in dict.fromkeys(stored) if path not in seen]
    return clean, to_delete


class ImageService:
    def __init__(self, file_store: LocalFileStore, activity_log: ActivityLog):
        self.file_store = file_store
        self.activity_log = activity_log

    def save_uploads(self, uploads: Iterable[NewUpload]) -> List[str]:
        """Write each non-empty upload in order and return their public paths.

        Write failures propagate; nothing is rolled back.
        """
        paths = []
        for upload in uploads:
            if not upload.content or not upload.filename:
                continue
            paths.append(self.file_store.write(upload.filename, upload.content))
        return paths

    def delete_images(self, paths: Iterable[str]) -> Tuple[List[str], List[str]]:
        """Best-effort removal; returns ``(deleted, failed)``."""
        deleted, failed = [], []
        for path in paths:
            try:
                self.file_store.delete(path)
            except FileStoreError as e:
                failed.append(path)
                logger.warning("Image cleanup skipped for %s: %s", path, e)
                self.activity_log.append(f"ERROR: could not delete {path}: {e}")
            else:
                deleted.append(path)
                self.activity_log.append(f"DELETED FILE: {path}")
        return deleted, failed

    def reconcile(
        self,
        stored: List[str],
        kept: Iterable[str],
        uploads: Optional[Iterable[NewUpload]] = None,
    ) -> ImageSetResult:
        """Compute the final image list for an edit and prune dropped files.

        Deletes run first, then uploads are written; the caller persists
        ``result.images``.
        """
        kept_paths, to_delete = plan_reconciliation(stored or [], kept)
        deleted, failed = self.delete_images(to_delete)
        uploaded = self.save_uploads(uploads or [])
        return ImageSetResult(
            images=kept_paths + uploaded,
            deleted=deleted,
            failed=failed,
            uploaded=uploaded,
        )
