from flask import current_app, request

from quizrelay import socketio
from quizrelay.services.relay.protocol import JOIN_EVENT, PROGRESS_EVENT


def _relay():
    return current_app.extensions['relay']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    # Nothing is sent back; the next broadcast tick carries the leaderboard
    _relay().connect(_get_sid())


def handle_disconnect(reason=None):
    _relay().disconnect(_get_sid())


def handle_join(data):
    # Malformed joins are dropped without telling the sender
    _relay().join(_get_sid(), data)


def handle_update_progress(data):
    _relay().update_progress(_get_sid(), data)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the relay's Socket.IO event handlers on ``namespace``.

    None of these handlers emit; outbound traffic comes only from the
    broadcast scheduler.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(JOIN_EVENT, handle_join, namespace=namespace)
    socketio.on_event(PROGRESS_EVENT, handle_update_progress, namespace=namespace)
