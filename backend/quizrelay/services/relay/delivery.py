import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

EmitFn = Callable[[str, Any, str], None]
SpawnFn = Callable[..., Any]
BacklogFn = Callable[[str], int]


class Outbox:
    """Bounded per-connection queue of snapshots awaiting delivery.

    The head item stays queued while it is being emitted, so a connection
    whose emit is still in flight counts as backed up.
    """

    def __init__(self, limit: int = 1) -> None:
        self.limit = max(1, int(limit))
        self.pending: Deque[Tuple[str, Any]] = deque()
        self.draining = False

    def offer(self, event: str, payload: Any) -> bool:
        if len(self.pending) >= self.limit:
            return False
        self.pending.append((event, payload))
        return True


class SnapshotDelivery:
    """Best-effort fan-out of snapshots to every open connection.

    ``publish`` never blocks on a slow connection: a full outbox, or a
    transport that still holds unsent packets (``backlog``), drops the new
    snapshot for that connection only. Each outbox is drained by a task
    started through ``spawn``.
    """

    def __init__(self, emit: EmitFn, spawn: Optional[SpawnFn] = None, limit: int = 1,
                 backlog: Optional[BacklogFn] = None, logger: Optional[logging.Logger] = None) -> None:
        self._emit = emit
        self._backlog = backlog or (lambda handle: 0)
        self._spawn = spawn or (lambda fn, *args: fn(*args))
        self._limit = limit
        self._outboxes: Dict[str, Outbox] = {}
        self._lock = threading.Lock()
        self._logger = logger or logging.getLogger(__name__)

    def __len__(self) -> int:
        return len(self._outboxes)

    def open(self, handle: str) -> None:
        with self._lock:
            self._outboxes.setdefault(handle, Outbox(self._limit))

    def close(self, handle: str) -> None:
        with self._lock:
            self._outboxes.pop(handle, None)

    def pending(self, handle: str) -> int:
        with self._lock:
            outbox = self._outboxes.get(handle)
            return len(outbox.pending) if outbox else 0

    def publish(self, event: str, payload: Any) -> Tuple[int, int]:
        """Offer ``payload`` to every open connection; returns (sent, dropped)."""
        sent = dropped = 0
        to_drain: List[str] = []
        with self._lock:
            for handle, outbox in self._outboxes.items():
                if self._backlog(handle) > 0 or not outbox.offer(event, payload):
                    dropped += 1
                    continue
                sent += 1
                if not outbox.draining:
                    outbox.draining = True
                    to_drain.append(handle)
        for handle in to_drain:
            self._spawn(self._drain, handle)
        return sent, dropped

    def _drain(self, handle: str) -> None:
        while True:
            with self._lock:
                outbox = self._outboxes.get(handle)
                if outbox is None:
                    return
                if not outbox.pending:
                    outbox.draining = False
                    return
                event, payload = outbox.pending[0]
            try:
                self._emit(event, payload, handle)
            except Exception:
                self._logger.exception(f"[deliver-failed] sid={handle} event={event}")
            with self._lock:
                if outbox.pending:
                    outbox.pending.popleft()
