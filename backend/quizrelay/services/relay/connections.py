from enum import Enum
from typing import Dict, List, Optional


class SessionState(str, Enum):
    CONNECTED = 'connected'
    JOINED = 'joined'
    CLOSED = 'closed'


class ConnectionIndex:
    """Live connection handle -> identity map.

    A handle is tracked from ``open`` until ``unbind``; it is bound to an
    identity only after a successful join. Rebinding a handle overwrites the
    previous identity.
    """

    def __init__(self) -> None:
        self._handles: Dict[str, Optional[str]] = {}

    def __len__(self) -> int:
        return len(self._handles)

    def open(self, handle: str) -> None:
        self._handles.setdefault(handle, None)

    def bind(self, handle: str, identity: str) -> None:
        self._handles[handle] = identity

    def lookup(self, handle: str) -> Optional[str]:
        return self._handles.get(handle)

    def unbind(self, handle: str) -> None:
        self._handles.pop(handle, None)

    def handles(self) -> List[str]:
        return list(self._handles)

    def state(self, handle: str) -> SessionState:
        if handle not in self._handles:
            return SessionState.CLOSED
        if self._handles[handle] is None:
            return SessionState.CONNECTED
        return SessionState.JOINED
