from dataclasses import replace
from typing import Dict, List, Optional

from quizrelay.models import Active, PlayerRecord, RankedEntry, Stale


class PlayerRegistry:
    """Authoritative identity -> PlayerRecord map.

    Records are created or revived on join, patched by progress updates,
    marked stale on disconnect and deleted only by ``evict_older_than``.
    Insertion order of the underlying dict is the tie-break order for
    players with equal scores.
    """

    def __init__(self) -> None:
        self._players: Dict[str, PlayerRecord] = {}

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, identity: str) -> bool:
        return identity in self._players

    def get(self, identity: str) -> Optional[PlayerRecord]:
        return self._players.get(identity)

    def records(self) -> List[PlayerRecord]:
        return list(self._players.values())

    def upsert_on_join(self, identity: str, avatar_ref: Optional[str] = None) -> PlayerRecord:
        """Create a fresh record, or revive an existing one.

        Reviving clears the stale marker and refreshes the avatar when a
        non-empty one is supplied; score and status are left untouched.
        """
        record = self._players.get(identity)
        if record is None:
            record = PlayerRecord(identity=identity, avatar_ref=avatar_ref or '')
            self._players[identity] = record
            return record
        record.liveness = Active()
        if avatar_ref:
            record.avatar_ref = avatar_ref
        return record

    def apply_progress(self, identity: str, score: Optional[int] = None, status: Optional[str] = None) -> bool:
        record = self._players.get(identity)
        if record is None:
            return False
        if score is not None:
            record.score = score
        if status is not None:
            record.status = status
        return True

    def mark_disconnected(self, identity: str, now: float) -> bool:
        record = self._players.get(identity)
        if record is None:
            return False
        record.liveness = Stale(since=now)
        return True

    def evict_older_than(self, now: float, ttl: float) -> int:
        expired = [
            identity for identity, record in self._players.items()
            if isinstance(record.liveness, Stale) and now - record.liveness.since > ttl
        ]
        for identity in expired:
            del self._players[identity]
        return len(expired)

    def seed_bot(self, identity: str, avatar_ref: str, score: int, status: str = 'Bot') -> Optional[PlayerRecord]:
        if identity in self._players:
            return None
        record = PlayerRecord(identity=identity, avatar_ref=avatar_ref, score=score, status=status, is_bot=True)
        self._players[identity] = record
        return record

    def ranked_top(self, k: int) -> List[RankedEntry]:
        # sorted() is stable, so equal scores keep insertion order
        ordered = sorted(self._players.values(), key=lambda r: r.score, reverse=True)
        return [RankedEntry(record=replace(record), rank=index) for index, record in enumerate(ordered[:max(k, 0)], 1)]
