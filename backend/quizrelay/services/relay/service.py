import logging
import random
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from quizrelay.models import RankedEntry
from .connections import ConnectionIndex, SessionState
from .delivery import SnapshotDelivery
from .protocol import LEADERBOARD_EVENT, parse_join, parse_progress
from .registry import PlayerRegistry


class RelayService:
    """Leaderboard relay state: player registry, connection index, delivery.

    Built once per application and handed to the socket handlers and the
    periodic tasks. All registry/index mutation happens under one lock.
    """

    def __init__(self, delivery: SnapshotDelivery, leaderboard_size: int = 100, player_ttl: float = 5 * 60 * 60,
                 status_max_length: int = 64, clock: Callable[[], float] = time.time,
                 logger: Optional[logging.Logger] = None) -> None:
        self.registry = PlayerRegistry()
        self.connections = ConnectionIndex()
        self.delivery = delivery
        self.leaderboard_size = leaderboard_size
        self.player_ttl = player_ttl
        self.status_max_length = status_max_length
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()

    # ---- Connection lifecycle ----

    def connect(self, handle: str) -> None:
        with self._lock:
            self.connections.open(handle)
        self.delivery.open(handle)

    def join(self, handle: str, data: Any) -> bool:
        message = parse_join(data)
        if message is None:
            self.logger.debug(f"[join-rejected] sid={handle}")
            return False
        with self._lock:
            # A join handled after its disconnect must not resurrect the handle
            if self.connections.state(handle) is SessionState.CLOSED:
                self.logger.debug(f"[join-closed] sid={handle}")
                return False
            revived = message.identity in self.registry
            self.registry.upsert_on_join(message.identity, message.avatar_ref)
            self.connections.bind(handle, message.identity)
        self.logger.info(f"[join] player={message.identity} sid={handle} revived={revived}")
        return True

    def update_progress(self, handle: str, data: Any) -> bool:
        patch = parse_progress(data, self.status_max_length)
        if patch is None:
            self.logger.debug(f"[progress-rejected] sid={handle}")
            return False
        with self._lock:
            identity = self.connections.lookup(handle)
            if identity is None:
                return False
            return self.registry.apply_progress(identity, score=patch.score, status=patch.status)

    def disconnect(self, handle: str) -> Optional[str]:
        with self._lock:
            identity = self.connections.lookup(handle)
            if identity is not None:
                self.registry.mark_disconnected(identity, self.clock())
            self.connections.unbind(handle)
        self.delivery.close(handle)
        if identity is not None:
            self.logger.info(f"[disconnect] player={identity} sid={handle}")
        return identity

    def session_state(self, handle: str) -> SessionState:
        with self._lock:
            return self.connections.state(handle)

    # ---- Periodic work ----

    def snapshot(self, limit: Optional[int] = None) -> List[RankedEntry]:
        with self._lock:
            return self.registry.ranked_top(self.leaderboard_size if limit is None else limit)

    def broadcast(self) -> Optional[Dict[str, int]]:
        """Push the ranked snapshot to every open connection, if any player is known."""
        with self._lock:
            if not len(self.registry):
                return None
            payload = [entry.to_dict() for entry in self.registry.ranked_top(self.leaderboard_size)]
        sent, dropped = self.delivery.publish(LEADERBOARD_EVENT, payload)
        return {'entries': len(payload), 'sent': sent, 'dropped': dropped}

    def sweep(self) -> int:
        with self._lock:
            removed = self.registry.evict_older_than(self.clock(), self.player_ttl)
            remaining = len(self.registry)
        if removed:
            self.logger.info(f"[sweep] removed={removed} remaining={remaining}")
        return removed

    def seed_bots(self, count: int, rng: Optional[random.Random] = None) -> List[str]:
        """Adds demo bot players; bots stay Active and are never swept."""
        rng = rng or random.Random()
        names = []
        with self._lock:
            for i in range(1, count + 1):
                name = f'bot-{i}'
                record = self.registry.seed_bot(
                    name,
                    avatar_ref=f'https://api.dicebear.com/7.x/bottts/svg?seed={name}',
                    score=rng.randint(0, 500),
                )
                if record is not None:
                    names.append(name)
        self.logger.info(f"[seed] bots={len(names)}")
        return names

    def stats(self) -> Dict[str, int]:
        with self._lock:
            records = self.registry.records()
            active = sum(1 for r in records if r.is_active)
            return {
                'players': len(records),
                'connections': len(self.connections),
                'active': active,
                'stale': len(records) - active,
            }
