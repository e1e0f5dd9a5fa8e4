import itertools
import pytest
from rental_admin.services.file_store import FileStoreError
from rental_admin.services.image_service import (
    ImageService,
    NewUpload,
    plan_reconciliation,
)


class RecordingStore:
    """File store stand-in that remembers every call."""

    def __init__(self, missing=()):
        self.missing = set(missing)
        self.deleted = []
        self.written = []

    def delete(self, path):
        self.deleted.append(path)
        if path in self.missing:
            raise FileStoreError(f"{path} does not exist")

    def write(self, name, data):
        path = f"/uploads/new-{len(self.written)}-{name}"
        self.written.append(path)
        return path


class RecordingLog:
    def __init__(self):
        self.messages = []

    def append(self, message):
        self.messages.append(message)
        return {"message": message}


STORED = ["/uploads/a.jpg", "/uploads/b.jpg", "/uploads/c.jpg", "/uploads/d.jpg"]


def _kept_lists():
    for size in range(len(STORED) + 1):
        for subset in itertools.combinations(STORED, size):
            yield list(reversed(subset))


@pytest.mark.parametrize("kept", list(_kept_lists()))
def test_deletion_set_is_stored_minus_kept(kept):
    clean, to_delete = plan_reconciliation(STORED, kept)

    assert clean == kept
    assert set(to_delete) == set(STORED) - set(kept)


def test_unknown_and_duplicate_kept_paths_are_dropped():
    clean, to_delete = plan_reconciliation(
        STORED, ["/uploads/c.jpg", "/etc/passwd", "/uploads/c.jpg", "/uploads/a.jpg"]
    )
    assert clean == ["/uploads/c.jpg", "/uploads/a.jpg"]
    assert to_delete == ["/uploads/b.jpg", "/uploads/d.jpg"]


def test_final_list_is_kept_order_then_uploads():
    store, log = RecordingStore(), RecordingLog()
    service = ImageService(store, log)

    result = service.reconcile(
        STORED,
        ["/uploads/d.jpg", "/uploads/b.jpg"],
        [NewUpload("x.jpg", b"x"), NewUpload("y.jpg", b"y")],
    )

    assert result.images == [
        "/uploads/d.jpg",
        "/uploads/b.jpg",
        "/uploads/new-0-x.jpg",
        "/uploads/new-1-y.jpg",
    ]
    assert len(result.images) == 2 + 2
    assert sorted(store.deleted) == ["/uploads/a.jpg", "/uploads/c.jpg"]


def test_missing_file_does_not_stop_the_batch():
    store = RecordingStore(missing={"/uploads/a.jpg"})
    log = RecordingLog()
    service = ImageService(store, log)

    result = service.reconcile(STORED, ["/uploads/d.jpg"])

    assert store.deleted == ["/uploads/a.jpg", "/uploads/b.jpg", "/uploads/c.jpg"]
    assert result.failed == ["/uploads/a.jpg"]
    assert result.deleted == ["/uploads/b.jpg", "/uploads/c.jpg"]
    assert result.images == ["/uploads/d.jpg"]
    assert any(m.startswith("ERROR") and "/uploads/a.jpg" in m for m in log.messages)


def test_empty_uploads_are_skipped():
    store, log = RecordingStore(), RecordingLog()
    service = ImageService(store, log)

    paths = service.save_uploads(
        [NewUpload("", b"data"), NewUpload("empty.jpg", b""), NewUpload("ok.jpg", b"1")]
    )

    assert paths == ["/uploads/new-0-ok.jpg"]


def test_reconcile_against_disk(file_store, activity_log):
    a = file_store.write("A.jpg", b"a")
    b = file_store.write("B.jpg", b"b")
    c = file_store.write("C.jpg", b"c")
    service = ImageService(file_store, activity_log)

    result = service.reconcile([a, b, c], [c, a], [NewUpload("D.jpg", b"d")])

    assert result.images[:2] == [c, a]
    assert len(result.images) == 3
    assert result.images[2].endswith("-D.jpg")
    assert not file_store.exists(b)
    assert file_store.exists(a) and file_store.exists(c)
    assert file_store.exists(result.images[2])
    assert activity_log.entries()[0]["message"] == f"DELETED FILE: {b}"


def test_already_deleted_file_is_logged_not_raised(file_store, activity_log):
    a = file_store.write("A.jpg", b"a")
    b = file_store.write("B.jpg", b"b")
    file_store.delete(b)
    service = ImageService(file_store, activity_log)

    result = service.reconcile([a, b], [a])

    assert result.images == [a]
    assert result.failed == [b]
    assert "ERROR" in activity_log.entries()[0]["message"]
