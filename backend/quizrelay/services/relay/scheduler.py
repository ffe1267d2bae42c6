from typing import Callable

from quizrelay import socketio


def broadcast_tick(app) -> None:
    """Send one leaderboard snapshot to all connections (no-op when nobody is known)."""
    result = app.extensions['relay'].broadcast()
    if result and result['dropped']:
        app.logger.info(f"[broadcast] entries={result['entries']} sent={result['sent']} dropped={result['dropped']}")


def sweep_tick(app) -> int:
    return app.extensions['relay'].sweep()


def _run_every(app, name: str, interval: float, tick: Callable) -> None:
    hb = int(app.config.get('SCHEDULER_HEARTBEAT_SEC', 0))
    since_heartbeat = 0.0
    while True:
        socketio.sleep(interval)
        try:
            with app.app_context():
                tick(app)
        except Exception:
            app.logger.exception(f"[{name}-error] tick failed")
        if hb > 0:
            since_heartbeat += interval
            if since_heartbeat >= hb:
                since_heartbeat = 0.0
                app.logger.info(f"[{name}-heartbeat] stats={app.extensions['relay'].stats()}")


def start_periodic_tasks(app) -> bool:
    """Start the broadcast and eviction loops for the lifetime of the process.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Each loop runs independently; a failing tick is logged and the loop continues
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return False

    broadcast_every = float(app.config.get('BROADCAST_INTERVAL_SEC', 5))
    sweep_every = float(app.config.get('CLEANUP_INTERVAL_SEC', 60))
    socketio.start_background_task(_run_every, app, 'broadcast', broadcast_every, broadcast_tick)
    socketio.start_background_task(_run_every, app, 'sweep', sweep_every, sweep_tick)
    app.logger.info(
        f"[scheduler-start] broadcast_every={broadcast_every}s sweep_every={sweep_every}s "
        f"ttl={app.config.get('PLAYER_TTL_SEC')}s"
    )
    return True
