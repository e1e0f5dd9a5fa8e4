import re
import pytest
from rental_admin.services.file_store import FileStoreError, LocalFileStore


def test_write_uses_timestamped_whitespace_free_name(file_store, upload_dir):
    path = file_store.write("my  lovely photo.jpg", b"jpeg-bytes")

    assert re.fullmatch(r"/uploads/\d{13}-my-lovely-photo\.jpg", path)
    name = path.rsplit("/", 1)[1]
    assert (upload_dir / name).read_bytes() == b"jpeg-bytes"


def test_write_keeps_only_the_base_name(file_store):
    path = file_store.write("C:\\Users\\me\\Pictures\\pool.png", b"x")
    assert path.endswith("-pool.png")
    assert "\\" not in path


def test_same_name_uploaded_twice_does_not_collide(file_store):
    first = file_store.write("front.jpg", b"1")
    second = file_store.write("front.jpg", b"2")
    assert first != second
    assert file_store.exists(first) and file_store.exists(second)


def test_exists_and_delete(file_store):
    path = file_store.write("a.jpg", b"a")
    assert file_store.exists(path)

    file_store.delete(path)

    assert not file_store.exists(path)


def test_delete_missing_file_raises(file_store):
    with pytest.raises(FileStoreError):
        file_store.delete("/uploads/never-written.jpg")


@pytest.mark.parametrize(
    "path", ["/uploads/../logs.json", "/etc/passwd", "/uploads/", "uploads/a.jpg"]
)
def test_paths_outside_the_upload_prefix_are_rejected(file_store, path):
    with pytest.raises(FileStoreError):
        file_store.delete(path)
    assert not file_store.exists(path)


def test_custom_prefix(tmp_path):
    store = LocalFileStore(root=str(tmp_path / "media"), url_prefix="media/")
    path = store.write("x.gif", b"gif")
    assert path.startswith("/media/")
    assert (tmp_path / "media" / path.rsplit("/", 1)[1]).exists()
