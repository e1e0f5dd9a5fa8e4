import json
import threading
from rental_admin.services.activity_log import ActivityLog


def test_missing_file_reads_as_empty(activity_log):
    assert activity_log.entries() == []


def test_append_writes_newest_first(activity_log, tmp_path):
    activity_log.append("first")
    activity_log.append("second")

    stored = json.loads((tmp_path / "logs.json").read_text())
    assert [e["message"] for e in stored] == ["second", "first"]
    assert all(set(e) == {"timestamp", "message"} for e in stored)


def test_log_keeps_only_the_most_recent_hundred(activity_log):
    for i in range(1, 102):
        activity_log.append(f"message {i}")

    entries = activity_log.entries()
    assert len(entries) == 100
    assert entries[0]["message"] == "message 101"
    assert entries[-1]["message"] == "message 2"


def test_corrupt_file_is_replaced(tmp_path):
    path = tmp_path / "logs.json"
    path.write_text("{not json")
    log = ActivityLog(path=str(path))

    assert log.entries() == []
    log.append("recovered")

    assert [e["message"] for e in json.loads(path.read_text())] == ["recovered"]


def test_non_list_json_is_treated_as_empty(tmp_path):
    path = tmp_path / "logs.json"
    path.write_text(json.dumps({"message": "not a list"}))
    log = ActivityLog(path=str(path))

    log.append("hello")

    assert [e["message"] for e in log.entries()] == ["hello"]


def test_custom_limit(tmp_path):
    log = ActivityLog(path=str(tmp_path / "small.json"), limit=3)
    for i in range(5):
        log.append(str(i))
    assert [e["message"] for e in log.entries()] == ["4", "3", "2"]


def test_unwritable_log_does_not_raise(tmp_path):
    # A directory where the file should be makes the final replace fail
    path = tmp_path / "logs.json"
    path.mkdir()
    (path / "keep").write_text("x")
    log = ActivityLog(path=str(path))

    entry = log.append("still fine")

    assert entry["message"] == "still fine"


def test_concurrent_appends_are_not_lost(tmp_path):
    path = str(tmp_path / "shared.json")

    def writer(worker):
        log = ActivityLog(path=path)
        for i in range(10):
            log.append(f"worker {worker} entry {i}")

    threads = [threading.Thread(target=writer, args=(w,)) for w in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stored = json.loads((tmp_path / "shared.json").read_text())
    expected = {f"worker {w} entry {i}" for w in range(8) for i in range(10)}
    assert len(stored) == 80
    assert {e["message"] for e in stored} == expected
