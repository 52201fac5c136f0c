#!/usr/bin/env python3
"""
DashboardStateStore：fetch 不写存储；replace 整份替换（默认值 + 本次输入）；损坏的存储内容按缺失处理；
后写覆盖先写（无 patch、无 CAS）；存储异常原样上抛。
"""
from __future__ import annotations

import json

from labboard.blobs import MemoryBlobStore
from labboard.schema import BENCH_SENTINEL, default_document
from labboard.state_store import DashboardStateStore, serialize_document

NOW = 1700000000000


class _CountingBlobStore(MemoryBlobStore):
    def __init__(self) -> None:
        super().__init__("lab-dashboard")
        self.set_calls = 0

    def set(self, key: str, value: bytes) -> None:
        self.set_calls += 1
        super().set(key, value)


class _BrokenBlobStore:
    def get(self, key: str):
        raise OSError("blob backend unavailable")

    def set(self, key: str, value: bytes) -> None:
        raise OSError("blob backend unavailable")


def test_fetch_on_empty_does_not_write() -> None:
    blobs = _CountingBlobStore()
    store = DashboardStateStore(blobs, "state")
    state = store.fetch_canonical(now=NOW)
    if state != default_document(NOW):
        raise SystemExit(f"FAIL: fetch on empty storage should return defaults, got={state}")
    store.fetch_canonical(now=NOW)
    if blobs.set_calls != 0 or blobs.get("state") is not None:
        raise SystemExit(f"FAIL: fetch must not write, set_calls={blobs.set_calls}")
    print("PASS: fetch on empty storage -> defaults, no write")


def test_replace_persists_normalized() -> None:
    blobs = _CountingBlobStore()
    store = DashboardStateStore(blobs, "state")
    state = store.replace_canonical({"benches": {"Hema": "John", "Ghost": "x"}, "notice": 5}, now=NOW)
    stored = json.loads(blobs.get("state").decode("utf-8"))
    if stored != state:
        raise SystemExit(f"FAIL: persisted document should equal returned one\nstored={stored}\nstate={state}")
    if "Ghost" in stored["benches"] or stored["notice"] != "":
        raise SystemExit(f"FAIL: persisted document not normalized, got={stored}")
    if store.fetch_canonical(now=NOW + 5) != state:
        raise SystemExit("FAIL: fetch after replace should return the stored document")
    print("PASS: replace persists the normalized document and echoes it")


def test_replace_is_whole_document_last_writer_wins() -> None:
    blobs = MemoryBlobStore("lab-dashboard")
    writer_a = DashboardStateStore(blobs, "state")
    writer_b = DashboardStateStore(blobs, "state")
    writer_a.replace_canonical({"notice": "from A", "benches": {"Hema": "Ann"}}, now=NOW)
    state_b = writer_b.replace_canonical({"benches": {"Cobas": "Ben"}}, now=NOW)
    current = writer_a.fetch_canonical(now=NOW)
    if current != state_b:
        raise SystemExit(f"FAIL: second write should win wholesale, got={current}")
    if current["notice"] != "" or current["benches"]["Hema"] != BENCH_SENTINEL:
        raise SystemExit(f"FAIL: omitted fields should reset to defaults, not keep A's values, got={current}")
    if current["benches"]["Cobas"] != "Ben":
        raise SystemExit(f"FAIL: B's own field missing, got={current['benches']}")
    print("PASS: no patch, no union: last writer's document only")


def test_corrupt_stored_blob_treated_as_absent() -> None:
    for raw in (b"{not json", b"\xff\xfe", b'{"layout": NaN}', b'{"staff": [1e400]}'):
        blobs = MemoryBlobStore("lab-dashboard")
        blobs.set("state", raw)
        state = DashboardStateStore(blobs, "state").fetch_canonical(now=NOW)
        if state != default_document(NOW):
            raise SystemExit(f"FAIL: corrupt blob {raw!r} should read as defaults, got={state}")
        if blobs.get("state") != raw:
            raise SystemExit("FAIL: fetch must not repair/overwrite the stored blob")
    print("PASS: corrupt stored blob -> defaults, left untouched")


def test_stale_stored_document_normalized_on_read() -> None:
    blobs = MemoryBlobStore("lab-dashboard")
    stale = {"notice": "old", "benches": {"Hema": "Kim", "RemovedBench": "x"}, "layout": {"noticePercent": 80}}
    blobs.set("state", serialize_document(stale))
    state = DashboardStateStore(blobs, "state").fetch_canonical(now=NOW)
    if state["notice"] != "old" or state["benches"]["Hema"] != "Kim" or "RemovedBench" in state["benches"]:
        raise SystemExit(f"FAIL: stale document not normalized, got={state}")
    if state["layout"] != {"noticePercent": 60.0, "rotationPercent": 20.0}:
        raise SystemExit(f"FAIL: stale layout not clamped, got={state['layout']}")
    if state["lastCorrectionDate"] != NOW:
        raise SystemExit("FAIL: missing lastCorrectionDate should become now")
    print("PASS: stale stored document normalized on read")


def test_storage_errors_propagate() -> None:
    store = DashboardStateStore(_BrokenBlobStore(), "state")
    for op in (lambda: store.fetch_canonical(), lambda: store.replace_canonical({})):
        try:
            op()
        except OSError:
            continue
        raise SystemExit("FAIL: storage errors should propagate")
    print("PASS: storage errors propagate")


def main() -> None:
    test_fetch_on_empty_does_not_write()
    test_replace_persists_normalized()
    test_replace_is_whole_document_last_writer_wins()
    test_corrupt_stored_blob_treated_as_absent()
    test_stale_stored_document_normalized_on_read()
    test_storage_errors_propagate()


if __name__ == "__main__":
    main()
