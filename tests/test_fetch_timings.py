import pytest

from utils import fetch_timings


@pytest.fixture(autouse=True)
def empty_buffer():
    fetch_timings.get_and_reset()
    yield
    fetch_timings.get_and_reset()


def test_timed_call_records_success_and_failure():
    assert fetch_timings.timed_call("directions", "A-B", lambda x: x * 2, 21) == 42

    def fail():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        fetch_timings.timed_call("directions", "B-C", fail)

    records = fetch_timings.get_and_reset()
    assert [(r["edge_id"], r["ok"]) for r in records] == [("A-B", True), ("B-C", False)]
    assert fetch_timings.get_and_reset() == []


def test_buffer_is_capped():
    for index in range(fetch_timings.MAX_RECORDS + 5):
        fetch_timings.record_fetch_timing("directions", 0.01, edge_id=f"edge-{index}")

    records = fetch_timings.get_and_reset()

    assert len(records) == fetch_timings.MAX_RECORDS
    # oldest entries are the ones dropped
    assert records[0]["edge_id"] == "edge-5"
