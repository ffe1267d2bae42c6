from flask import Blueprint, current_app, jsonify, request

leaderboard = Blueprint('leaderboard', __name__)


@leaderboard.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    """
    Returns the same ranked snapshot the broadcast scheduler pushes to clients.
    """
    relay = current_app.extensions['relay']
    raw_limit = request.args.get('limit')
    limit = relay.leaderboard_size
    if raw_limit is not None:
        try:
            limit = int(raw_limit)
        except ValueError:
            return jsonify({'error': 'limit must be an integer'}), 400
        limit = max(1, min(limit, relay.leaderboard_size))
    return jsonify([entry.to_dict() for entry in relay.snapshot(limit)])


@leaderboard.route('/health', methods=['GET'])
def health():
    return jsonify(current_app.extensions['relay'].stats())
