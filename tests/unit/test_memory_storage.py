"""
Unit tests for MemoryStorage.

Covers:
    - save (insert, reject code collision, created_at override, visit_count as given)
    - find_by_short_code (found, not found, snapshot isolation)
    - increment_visit_count (valid, missing, never creates)
    - close (idempotent, operations after close)
    - concurrency (same-key saves, distinct-key saves, increments)
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from shortlink.context import RequestContext
from shortlink.errors import (
    CodeExistsError,
    ContextCancelledError,
    DeadlineExceededError,
    NotFoundError,
    StoreClosedError,
)
from shortlink.storage.memory_storage import MemoryStorage
from shortlink.storage.models import Link


def test_save_then_find(storage):
    storage.save(Link(short_code="abc12", long_url="https://x.com"))
    found = storage.find_by_short_code("abc12")
    assert found.long_url == "https://x.com"
    assert found.visit_count == 0
    assert found.short_code == "abc12"


def test_second_save_conflicts_and_keeps_original(storage):
    storage.save(Link(short_code="abc12", long_url="https://x.com"))
    before = storage.find_by_short_code("abc12")

    with pytest.raises(CodeExistsError) as excinfo:
        storage.save(Link(short_code="abc12", long_url="https://y.com", visit_count=9))
    assert excinfo.value.short_code == "abc12"

    after = storage.find_by_short_code("abc12")
    assert after == before
    assert after.long_url == "https://x.com"


def test_same_url_under_different_codes_is_allowed(storage):
    storage.save(Link(short_code="oldcode", long_url="https://same.com"))
    storage.save(Link(short_code="newcode", long_url="https://same.com"))
    assert storage.find_by_short_code("newcode").long_url == "https://same.com"


def test_save_overrides_created_at_with_utc_now(storage):
    stale = datetime(2000, 1, 1, tzinfo=timezone.utc)
    before = datetime.now(timezone.utc)
    storage.save(Link(short_code="stamp1", long_url="https://x.com", created_at=stale))
    created = storage.find_by_short_code("stamp1").created_at

    assert created is not None and created != stale
    assert created.tzinfo is not None
    assert before <= created <= datetime.now(timezone.utc) + timedelta(seconds=1)


def test_save_stores_visit_count_as_given(storage):
    storage.save(Link(short_code="seeded", long_url="https://x.com", visit_count=3))
    assert storage.find_by_short_code("seeded").visit_count == 3


def test_created_at_not_changed_by_increment(storage):
    storage.save(Link(short_code="stamp2", long_url="https://x.com"))
    created = storage.find_by_short_code("stamp2").created_at
    storage.increment_visit_count("stamp2")
    assert storage.find_by_short_code("stamp2").created_at == created


def test_find_missing_raises_not_found(storage):
    with pytest.raises(NotFoundError):
        storage.find_by_short_code("missing")
    with pytest.raises(LookupError):
        storage.find_by_short_code("")


def test_increment_success(storage):
    storage.save(Link(short_code="abc123", long_url="https://example.com"))
    storage.increment_visit_count("abc123")
    storage.increment_visit_count("abc123")
    assert storage.find_by_short_code("abc123").visit_count == 2


def test_increment_missing_raises_and_creates_nothing(storage):
    with pytest.raises(NotFoundError):
        storage.increment_visit_count("nope1")
    with pytest.raises(NotFoundError):
        storage.find_by_short_code("nope1")
    assert len(storage) == 0


def test_returned_snapshot_is_not_changed_by_later_increments(storage):
    storage.save(Link(short_code="snap1", long_url="https://x.com"))
    snapshot = storage.find_by_short_code("snap1")
    storage.increment_visit_count("snap1")
    assert snapshot.visit_count == 0
    assert storage.find_by_short_code("snap1").visit_count == 1


def test_snapshot_is_read_only(storage):
    storage.save(Link(short_code="ro123", long_url="https://x.com"))
    snapshot = storage.find_by_short_code("ro123")
    with pytest.raises(AttributeError):
        snapshot.visit_count = 100  # type: ignore[misc]


def test_close_is_idempotent():
    store = MemoryStorage()
    store.save(Link(short_code="abc12", long_url="https://x.com"))
    store.close()
    assert store.closed
    store.close()
    assert store.closed
    assert len(store) == 0


@pytest.mark.parametrize(
    "operation",
    [
        lambda s: s.save(Link(short_code="later", long_url="https://x.com")),
        lambda s: s.find_by_short_code("later"),
        lambda s: s.increment_visit_count("later"),
    ],
)
def test_operations_after_close_raise(operation):
    store = MemoryStorage()
    store.close()
    with pytest.raises(StoreClosedError):
        operation(store)


def test_cancelled_context_is_honoured(storage):
    ctx = RequestContext()
    ctx.cancel()
    with pytest.raises(ContextCancelledError):
        storage.save(Link(short_code="abc12", long_url="https://x.com"), ctx=ctx)
    assert len(storage) == 0


def test_expired_context_is_honoured(storage):
    storage.save(Link(short_code="abc12", long_url="https://x.com"))
    with pytest.raises(DeadlineExceededError):
        storage.find_by_short_code("abc12", ctx=RequestContext(timeout=0))


# -------------------------
# Concurrency
# -------------------------

def test_concurrent_saves_same_code_single_winner(storage):
    n = 50
    barrier = threading.Barrier(n)

    def _save(i):
        barrier.wait()
        try:
            storage.save(Link(short_code="conflict", long_url=f"https://example.com/{i}"))
            return i
        except CodeExistsError:
            return None

    with ThreadPoolExecutor(max_workers=n) as pool:
        results = list(pool.map(_save, range(n)))

    winners = [r for r in results if r is not None]
    assert len(winners) == 1
    assert results.count(None) == n - 1
    assert storage.find_by_short_code("conflict").long_url == f"https://example.com/{winners[0]}"


def test_concurrent_saves_distinct_codes_all_stored(storage):
    def _save_batch(worker):
        for j in range(10):
            storage.save(Link(short_code=f"link_{worker}_{j}", long_url=f"https://example.com/{worker}/{j}"))

    with ThreadPoolExecutor(max_workers=20) as pool:
        list(pool.map(_save_batch, range(100)))

    assert len(storage) == 1000
    assert storage.find_by_short_code("link_42_7").long_url == "https://example.com/42/7"


def test_concurrent_increments_are_not_lost(storage):
    storage.save(Link(short_code="hot01", long_url="https://x.com"))
    n = 2000

    with ThreadPoolExecutor(max_workers=16) as pool:
        list(pool.map(lambda _: storage.increment_visit_count("hot01"), range(n)))

    assert storage.find_by_short_code("hot01").visit_count == n
