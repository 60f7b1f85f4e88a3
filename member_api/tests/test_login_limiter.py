"""
Tests for the per-client login attempt limiter.
"""

import threading

import pytest

from member_api.auth import AttemptLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return AttemptLimiter(
        max_attempts=3,
        window_seconds=60,
        block_seconds=120,
        sweep_interval_seconds=30,
        clock=clock,
    )


def test_blocks_on_max_attempts_call(limiter, clock):
    assert limiter.check_and_record("1.2.3.4") == (True, 0.0)
    assert limiter.check_and_record("1.2.3.4") == (True, 0.0)

    allowed, retry_after = limiter.check_and_record("1.2.3.4")
    assert allowed is False
    assert retry_after == pytest.approx(120)

    clock.advance(5)
    allowed, remaining = limiter.check_and_record("1.2.3.4")
    assert allowed is False
    assert remaining == pytest.approx(115)
    assert remaining < retry_after


def test_blocked_calls_do_not_extend_block(limiter, clock):
    for _ in range(3):
        limiter.check_and_record("k")

    for _ in range(10):
        clock.advance(10)
        limiter.check_and_record("k")

    # 100s into a 120s block
    allowed, remaining = limiter.check_and_record("k")
    assert allowed is False
    assert remaining == pytest.approx(20)


def test_block_expiry_restarts_count(limiter, clock):
    for _ in range(3):
        limiter.check_and_record("k")

    clock.advance(120)
    assert limiter.check_and_record("k") == (True, 0.0)
    # Count restarted at 1, so the next attempt is the second
    assert limiter.check_and_record("k") == (True, 0.0)
    assert limiter.check_and_record("k")[0] is False


def test_window_elapsed_starts_fresh(limiter, clock):
    limiter.check_and_record("k")
    limiter.check_and_record("k")

    clock.advance(61)
    assert limiter.check_and_record("k") == (True, 0.0)
    assert limiter.check_and_record("k") == (True, 0.0)


def test_window_boundary_is_inclusive(limiter, clock):
    limiter.check_and_record("k")
    limiter.check_and_record("k")

    # Exactly one window later still counts towards the same window
    clock.advance(60)
    assert limiter.check_and_record("k")[0] is False


def test_window_anchored_to_first_attempt(limiter, clock):
    limiter.check_and_record("k")
    clock.advance(50)
    limiter.check_and_record("k")
    clock.advance(20)

    # 70s after the first attempt: the window has rolled over
    assert limiter.check_and_record("k") == (True, 0.0)


def test_keys_are_independent(limiter):
    for _ in range(3):
        limiter.check_and_record("1.1.1.1")

    assert limiter.check_and_record("1.1.1.1")[0] is False
    assert limiter.check_and_record("2.2.2.2") == (True, 0.0)


def test_reset_clears_block(limiter):
    for _ in range(3):
        limiter.check_and_record("k")
    assert limiter.check_and_record("k")[0] is False

    limiter.reset("k")
    assert limiter.check_and_record("k") == (True, 0.0)


def test_reset_unknown_key_is_noop(limiter):
    limiter.reset("never-seen")
    assert len(limiter) == 0


def test_single_attempt_limit(clock):
    limiter = AttemptLimiter(max_attempts=1, window_seconds=60, block_seconds=120, clock=clock)

    assert limiter.check_and_record("k") == (True, 0.0)
    assert limiter.check_and_record("k")[0] is False


def test_rejects_non_positive_max_attempts():
    with pytest.raises(ValueError):
        AttemptLimiter(max_attempts=0)


def test_sweep_removes_stale_records(limiter, clock):
    limiter.check_and_record("idle")
    for _ in range(3):
        limiter.check_and_record("blocked")
    clock.advance(61)
    limiter.check_and_record("active")

    # "idle" is past its window; "blocked" still has 59s to go
    assert limiter.sweep() == 1
    assert len(limiter) == 2

    clock.advance(60)
    # Block expired; "active" is exactly at its window edge and survives
    assert limiter.sweep() == 1
    assert len(limiter) == 1

    clock.advance(1)
    assert limiter.sweep() == 1
    assert len(limiter) == 0


def test_sweep_keeps_fresh_records(limiter):
    limiter.check_and_record("k")
    assert limiter.sweep() == 0
    assert len(limiter) == 1


def test_background_sweeper_runs():
    limiter = AttemptLimiter(
        max_attempts=3,
        window_seconds=0.01,
        block_seconds=0.01,
        sweep_interval_seconds=0.01,
    )
    limiter.check_and_record("k")

    swept = threading.Event()
    original_sweep = limiter.sweep

    def sweep():
        removed = original_sweep()
        if len(limiter) == 0:
            swept.set()
        return removed

    limiter.sweep = sweep
    limiter.start()
    try:
        assert swept.wait(timeout=5)
    finally:
        limiter.stop()


def test_start_is_idempotent(limiter):
    limiter.start()
    try:
        first = limiter._sweeper
        limiter.start()
        assert limiter._sweeper is first
        assert limiter.running
    finally:
        limiter.stop()

    assert not limiter.running


def test_stop_without_start(limiter):
    limiter.stop()
    assert not limiter.running


def test_restart_after_stop(limiter):
    limiter.start()
    limiter.stop()
    limiter.start()
    try:
        assert limiter.running
    finally:
        limiter.stop()


def test_concurrent_attempts_are_all_counted():
    limiter = AttemptLimiter(max_attempts=50, window_seconds=300, block_seconds=900)
    results: list[bool] = []
    results_lock = threading.Lock()
    barrier = threading.Barrier(10)

    def worker():
        barrier.wait()
        for _ in range(10):
            allowed, _ = limiter.check_and_record("shared")
            with results_lock:
                results.append(allowed)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # Calls 1..49 allowed, call 50 blocks, the rest are rejected
    assert results.count(True) == 49
    assert results.count(False) == 51
