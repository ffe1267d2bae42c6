import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', '3000'))
    # Comma separated list, or "*" for any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    if CORS_ORIGINS != '*':
        CORS_ORIGINS = [o.strip() for o in CORS_ORIGINS.split(',') if o.strip()]
    RELAY_NAMESPACE = os.environ.get('RELAY_NAMESPACE', '/')
    # Leaderboard broadcast (seconds) and snapshot size
    BROADCAST_INTERVAL_SEC = float(os.environ.get('BROADCAST_INTERVAL_SEC', '5'))
    LEADERBOARD_SIZE = int(os.environ.get('LEADERBOARD_SIZE', '100'))
    # Snapshots queued per connection before new ones are dropped
    OUTBOX_LIMIT = int(os.environ.get('OUTBOX_LIMIT', '1'))
    # Disconnected players are evicted after PLAYER_TTL_SEC; checked every CLEANUP_INTERVAL_SEC
    CLEANUP_INTERVAL_SEC = float(os.environ.get('CLEANUP_INTERVAL_SEC', '60'))
    PLAYER_TTL_SEC = float(os.environ.get('PLAYER_TTL_SEC', str(5 * 60 * 60)))
    STATUS_MAX_LENGTH = int(os.environ.get('STATUS_MAX_LENGTH', '64'))
    # Optional: heartbeat interval for scheduler logs (sec). 0 disables.
    SCHEDULER_HEARTBEAT_SEC = int(os.environ.get('SCHEDULER_HEARTBEAT_SEC', '0'))
