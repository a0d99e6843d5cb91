"""
engine.py - Ledger Engine

Serializing front end for a TokenLedger shared by several callers.

The ledger itself holds no locks and assumes one operation in flight at a time.
The engine enforces that: direct submissions run under a lock, and queued
calls are drained in arrival order by step().

Execution order each step():
1. Take every call queued so far (FIFO)
2. Submit each to the ledger, one at a time
3. Return (call, result) pairs; rejected calls are reported, not raised

The operation log is the audit trail; poll_events() hands new records to
off-ledger observers exactly once.
"""

from __future__ import annotations
from collections import deque
from typing import Deque, Iterable, List, Optional, Tuple
import threading

from .core import Call, OperationRecord, Result
from .ledger import TokenLedger


class LedgerEngine:
    """
    Multi-caller front end that serializes calls into one TokenLedger.

    Features:
    - Lock-guarded direct submission (safe from any thread)
    - FIFO queue for batched processing
    - Observer polling over the operation log
    """

    def __init__(self, ledger: TokenLedger):
        """
        Initialize the engine.

        Args:
            ledger: The ledger to operate on
        """
        self.ledger = ledger
        self.verbose = ledger.verbose
        self._lock = threading.Lock()
        self._queue: Deque[Call] = deque()
        self._event_cursor = len(ledger.operation_log)

    def submit(self, call: Call) -> Result:
        """Execute one call immediately, serialized against all other calls."""
        with self._lock:
            return self.ledger.submit(call)

    def enqueue(self, call: Call) -> int:
        """
        Queue a call for the next step().

        Returns:
            Number of calls now pending
        """
        if not isinstance(call, Call):
            raise TypeError(f"expected Call, got {type(call)}")
        with self._lock:
            self._queue.append(call)
            return len(self._queue)

    def enqueue_many(self, calls: Iterable[Call]) -> int:
        count = 0
        for call in calls:
            count = self.enqueue(call)
        return count

    def step(self) -> List[Tuple[Call, Result]]:
        """
        Drain the queue, submitting calls in the order they arrived.

        Calls enqueued while a step is running wait for the next step.

        Returns:
            (call, result) for every processed call
        """
        with self._lock:
            batch = list(self._queue)
            self._queue.clear()
            processed: List[Tuple[Call, Result]] = []
            for call in batch:
                processed.append((call, self.ledger.submit(call)))

        if self.verbose and batch:
            applied = sum(1 for _, result in processed if result.is_ok)
            print(f"[ENGINE] step processed {len(batch)} calls, {applied} applied")

        return processed

    def run(self, calls: Iterable[Call]) -> List[Tuple[Call, Result]]:
        """Queue calls and process them (plus anything already pending) in one step."""
        self.enqueue_many(calls)
        return self.step()

    # ========================================================================
    # QUERY METHODS
    # ========================================================================

    @property
    def pending(self) -> int:
        """Get count of queued calls."""
        with self._lock:
            return len(self._queue)

    def peek_next(self) -> Optional[Call]:
        """Peek at the next queued call."""
        with self._lock:
            return self._queue[0] if self._queue else None

    def poll_events(self, memo_only: bool = False) -> List[OperationRecord]:
        """
        Return log records appended since the previous poll.

        Args:
            memo_only: Only return memo transfers
        """
        with self._lock:
            records = self.ledger.events(self._event_cursor)
            self._event_cursor += len(records)
        if memo_only:
            return [record for record in records if record.memo is not None]
        return records
