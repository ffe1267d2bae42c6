"""Leaderboard relay services: player registry, connection index,
snapshot delivery and the periodic broadcast/eviction tasks.

Socket handlers and HTTP routes import from here; nothing in this package
knows about Socket.IO request context.
"""

from .connections import ConnectionIndex, SessionState
from .delivery import Outbox, SnapshotDelivery
from .registry import PlayerRegistry
from .service import RelayService

__all__ = [
    'ConnectionIndex',
    'Outbox',
    'PlayerRegistry',
    'RelayService',
    'SessionState',
    'SnapshotDelivery',
]
