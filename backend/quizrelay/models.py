from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

DEFAULT_STATUS = 'Just Joined'


@dataclass(frozen=True)
class Active:
    """The player has a live connection."""


@dataclass(frozen=True)
class Stale:
    """The player has no live connection since ``since`` (epoch seconds)."""
    since: float


Liveness = Union[Active, Stale]


@dataclass
class PlayerRecord:
    identity: str
    avatar_ref: str = ''
    score: int = 0
    status: str = DEFAULT_STATUS
    is_bot: bool = False
    liveness: Liveness = field(default_factory=Active)

    @property
    def last_seen(self) -> Optional[float]:
        if isinstance(self.liveness, Stale):
            return self.liveness.since
        return None

    @property
    def is_active(self) -> bool:
        return isinstance(self.liveness, Active)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'username': self.identity,
            'avatarUrl': self.avatar_ref,
            'score': self.score,
            'status': self.status,
            'isBot': self.is_bot,
        }


@dataclass(frozen=True)
class RankedEntry:
    """A player row in a snapshot; rank is computed per snapshot, never stored."""
    record: PlayerRecord
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        data = self.record.to_dict()
        data['rank'] = self.rank
        return data
