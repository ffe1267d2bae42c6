"""Inbound event parsing.

Payloads arrive as loose JSON objects from the game client. Each parser
returns a typed message, or ``None`` when the payload must be dropped.
"""
import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Optional

JOIN_EVENT = 'join'
PROGRESS_EVENT = 'update_progress'
LEADERBOARD_EVENT = 'leaderboard_update'


@dataclass(frozen=True)
class JoinMessage:
    identity: str
    avatar_ref: Optional[str] = None


@dataclass(frozen=True)
class ProgressPatch:
    score: Optional[int] = None
    status: Optional[str] = None


def parse_join(data: Any) -> Optional[JoinMessage]:
    if not isinstance(data, dict):
        return None
    username = data.get('username')
    if not isinstance(username, str) or not username.strip():
        return None
    avatar = data.get('avatarUrl')
    if not isinstance(avatar, str) or not avatar:
        avatar = None
    return JoinMessage(identity=username, avatar_ref=avatar)


def parse_progress(data: Any, status_max_length: int = 64) -> Optional[ProgressPatch]:
    """Validate a partial ``{score?, status?}`` patch.

    Any field of the wrong type rejects the whole patch. Unknown keys are
    ignored. Fractional scores are truncated toward zero.
    """
    if not isinstance(data, dict):
        return None
    score = data.get('score')
    status = data.get('status')
    if score is not None:
        if isinstance(score, bool) or not isinstance(score, Real):
            return None
        if not math.isfinite(score) or score < 0:
            return None
        score = int(score)
    if status is not None:
        if not isinstance(status, str) or len(status) > status_max_length:
            return None
    return ProgressPatch(score=score, status=status)
