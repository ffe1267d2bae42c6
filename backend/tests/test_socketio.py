import queue

from quizrelay import socketio
from quizrelay.services.relay.scheduler import broadcast_tick, start_periodic_tasks, sweep_tick

TTL = 5 * 60 * 60


def _leaderboards(sio_client):
    return [pkt['args'][0] for pkt in sio_client.get_received() if pkt['name'] == 'leaderboard_update']


def test_socket_connect_and_join(sio_client, relay):
    assert sio_client.is_connected()
    sio_client.emit('join', {'username': 'alice', 'avatarUrl': 'A1'})

    assert relay.registry.get('alice') is not None
    assert len(relay.connections) == 1
    # Handlers never answer directly; only the broadcast tick sends data
    assert sio_client.get_received() == []


def test_progress_is_broadcast_on_next_tick(flask_app, sio_client):
    sio_client.emit('join', {'username': 'alice', 'avatarUrl': 'A1'})
    sio_client.emit('update_progress', {'score': 40, 'status': 'Round 1'})
    sio_client.emit('update_progress', {'score': 55})

    broadcast_tick(flask_app)
    boards = _leaderboards(sio_client)
    assert boards == [[{
        'username': 'alice',
        'avatarUrl': 'A1',
        'score': 55,
        'status': 'Round 1',
        'isBot': False,
        'rank': 1,
    }]]


def test_unjoined_connection_still_receives_leaderboard(flask_app, sio_factory):
    player = sio_factory()
    spectator = sio_factory()
    player.emit('join', {'username': 'alice'})
    spectator.emit('update_progress', {'score': 99})

    broadcast_tick(flask_app)
    board = _leaderboards(spectator)[0]
    assert [row['username'] for row in board] == ['alice']
    assert board[0]['score'] == 0


def test_no_broadcast_when_nobody_joined(flask_app, sio_client):
    broadcast_tick(flask_app)
    assert _leaderboards(sio_client) == []


def test_malformed_join_is_ignored(sio_client, relay):
    sio_client.emit('join', {'avatarUrl': 'A1'})
    sio_client.emit('join', 'alice')
    assert len(relay.registry) == 0
    assert sio_client.get_received() == []


def test_disconnect_keeps_player_ranked_until_swept(flask_app, sio_factory, relay, clock):
    leaver = sio_factory()
    watcher = sio_factory()
    leaver.emit('join', {'username': 'alice'})
    leaver.emit('update_progress', {'score': 80, 'status': 'Finished'})
    watcher.emit('join', {'username': 'bob'})
    leaver.disconnect()

    alice = relay.registry.get('alice')
    assert alice.last_seen == clock.now

    broadcast_tick(flask_app)
    board = _leaderboards(watcher)[0]
    assert [row['username'] for row in board] == ['alice', 'bob']

    clock.advance(TTL + 1)
    assert sweep_tick(flask_app) == 1
    broadcast_tick(flask_app)
    board = _leaderboards(watcher)[0]
    assert [row['username'] for row in board] == ['bob']


def test_rejoin_after_reconnect_keeps_score(sio_factory, relay):
    first = sio_factory()
    first.emit('join', {'username': 'alice'})
    first.emit('update_progress', {'score': 30})
    first.disconnect()

    second = sio_factory()
    second.emit('join', {'username': 'alice', 'avatarUrl': 'A2'})
    alice = relay.registry.get('alice')
    assert alice.is_active
    assert alice.score == 30
    assert alice.avatar_ref == 'A2'


def test_periodic_tasks_disabled_in_testing(flask_app):
    assert start_periodic_tasks(flask_app) is False


class _BackedUpSocket:
    """Stands in for an engine.io socket whose client stopped reading."""

    def __init__(self, unsent):
        self.queue = queue.Queue()
        for packet in range(unsent):
            self.queue.put(packet)


def test_lagging_client_misses_ticks_until_transport_drains(flask_app, sio_factory, relay, monkeypatch):
    lagging = sio_factory()
    reader = sio_factory()
    lagging.emit('join', {'username': 'alice'})
    reader.emit('join', {'username': 'bob'})

    monkeypatch.setitem(socketio.server.eio.sockets, lagging.eio_sid, _BackedUpSocket(unsent=3))
    result = relay.broadcast()
    assert result == {'entries': 2, 'sent': 1, 'dropped': 1}
    assert _leaderboards(lagging) == []
    assert len(_leaderboards(reader)) == 1

    monkeypatch.setitem(socketio.server.eio.sockets, lagging.eio_sid, _BackedUpSocket(unsent=0))
    broadcast_tick(flask_app)
    assert len(_leaderboards(lagging)) == 1
