from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = flask_app.config.get('CORS_ORIGINS', '*')
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One relay per process; handlers and timers reach it via app.extensions
    from quizrelay.services.relay import RelayService, SnapshotDelivery
    namespace = flask_app.config.get('RELAY_NAMESPACE', '/')

    def _emit(event, payload, sid):
        socketio.emit(event, payload, to=sid, namespace=namespace)

    def _backlog(sid):
        # Packets still waiting in the engine.io socket queue for this client
        server = socketio.server
        eio_sid = server.manager.eio_sid_from_sid(sid, namespace)
        eio_socket = server.eio.sockets.get(eio_sid) if eio_sid else None
        if eio_socket is None:
            return 0
        return eio_socket.queue.qsize()

    def _spawn(fn, *args):
        if flask_app.config.get('TESTING'):
            return fn(*args)
        return socketio.start_background_task(fn, *args)

    delivery = SnapshotDelivery(
        emit=_emit,
        spawn=_spawn,
        limit=flask_app.config.get('OUTBOX_LIMIT', 1),
        backlog=_backlog,
        logger=flask_app.logger,
    )
    flask_app.extensions['relay'] = RelayService(
        delivery,
        leaderboard_size=int(flask_app.config.get('LEADERBOARD_SIZE', 100)),
        player_ttl=float(flask_app.config.get('PLAYER_TTL_SEC', 5 * 60 * 60)),
        status_max_length=int(flask_app.config.get('STATUS_MAX_LENGTH', 64)),
        logger=flask_app.logger,
    )

    from quizrelay.routes import main
    flask_app.register_blueprint(main)

    from quizrelay.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api')

    from quizrelay.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    @click.command('serve')
    @click.option('--host', default='0.0.0.0', show_default=True)
    @click.option('--port', type=int, default=None, help='Defaults to the PORT setting.')
    @click.option('--seed-bots', 'seed_bots', type=int, default=0, show_default=True,
                  help='Number of demo bot players to add before serving.')
    def serve_command(host, port, seed_bots):
        """Runs the relay with its periodic broadcast and eviction tasks."""
        from quizrelay.services.relay.scheduler import start_periodic_tasks
        if seed_bots:
            flask_app.extensions['relay'].seed_bots(seed_bots)
            click.echo(f'Seeded {seed_bots} bot players.')
        start_periodic_tasks(flask_app)
        socketio.run(flask_app, host=host, port=port or int(flask_app.config.get('PORT', 3000)),
                     allow_unsafe_werkzeug=True)

    flask_app.cli.add_command(serve_command)

    return flask_app
