"""Login brute-force protection keyed by client identity.

Counts login attempts per client identity (normally the source IP) in a
sliding window that starts at the first attempt. Reaching the limit blocks
the identity for a fixed period. A background thread sweeps records whose
window and block have both expired so abandoned keys do not accumulate.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from member_api.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AttemptRecord:
    count: int
    window_start: float
    blocked_until: Optional[float] = None


class AttemptLimiter:
    """In-memory sliding-window attempt limiter with temporary blocking."""

    def __init__(
        self,
        max_attempts: int = 10,
        window_seconds: float = 300,
        block_seconds: float = 900,
        sweep_interval_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.block_seconds = block_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._records: dict[str, AttemptRecord] = {}
        self._stop_event = threading.Event()
        self._sweeper: Optional[threading.Thread] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def check_and_record(self, key: str) -> tuple[bool, float]:
        """Record an attempt for ``key`` and decide whether it may proceed.

        Returns ``(allowed, retry_after_seconds)``; ``retry_after_seconds`` is
        0 when allowed.
        """
        with self._lock:
            now = self._clock()
            record = self._records.get(key)

            if record is None:
                self._records[key] = AttemptRecord(count=1, window_start=now)
                return True, 0.0

            if record.blocked_until is not None:
                if now < record.blocked_until:
                    return False, record.blocked_until - now
                # Block expired: start over
                self._records[key] = AttemptRecord(count=1, window_start=now)
                return True, 0.0

            if now - record.window_start > self.window_seconds:
                self._records[key] = AttemptRecord(count=1, window_start=now)
                return True, 0.0

            record.count += 1
            if record.count >= self.max_attempts:
                record.blocked_until = now + self.block_seconds
                blocked = True
            else:
                blocked = False

        if blocked:
            logger.warning(
                "Login attempts blocked",
                data={
                    "key": key,
                    "attempts": self.max_attempts,
                    "block_seconds": self.block_seconds,
                },
            )
            return False, float(self.block_seconds)
        return True, 0.0

    def reset(self, key: str) -> None:
        """Forget all attempts for ``key`` (after a successful login)."""
        with self._lock:
            self._records.pop(key, None)

    def sweep(self) -> int:
        """Drop records that are past their window and not blocked, or whose block expired."""
        with self._lock:
            now = self._clock()
            expired = [
                key
                for key, record in self._records.items()
                if (record.blocked_until is None and now - record.window_start > self.window_seconds)
                or (record.blocked_until is not None and now >= record.blocked_until)
            ]
            for key in expired:
                del self._records[key]
        if expired:
            logger.debug("Swept login attempt records", data={"removed": len(expired)})
        return len(expired)

    def _run_sweeper(self) -> None:
        while not self._stop_event.wait(self.sweep_interval_seconds):
            try:
                self.sweep()
            except Exception:
                logger.exception("Login attempt sweep failed")

    def start(self) -> None:
        """Start the background sweep thread. Calling it again is a no-op."""
        with self._lock:
            if self._sweeper is not None and self._sweeper.is_alive():
                return
            self._stop_event.clear()
            self._sweeper = threading.Thread(
                target=self._run_sweeper,
                name="login-limiter-sweep",
                daemon=True,
            )
            self._sweeper.start()
        logger.info(
            "Login limiter sweep started",
            data={"interval_seconds": self.sweep_interval_seconds},
        )

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal the sweep thread to exit and wait for it."""
        self._stop_event.set()
        with self._lock:
            sweeper, self._sweeper = self._sweeper, None
        if sweeper is not None:
            sweeper.join(timeout)
            logger.info("Login limiter sweep stopped")

    @property
    def running(self) -> bool:
        sweeper = self._sweeper
        return sweeper is not None and sweeper.is_alive()
