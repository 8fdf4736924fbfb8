from flask import Blueprint, jsonify

from leaderboard import get_leaderboard_service
from leaderboard.errors import StorageError

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the leaderboard game server!'})


@main.route('/health')
def health():
    try:
        get_leaderboard_service().ping()
    except StorageError as exc:
        return jsonify({'status': 'unavailable', 'error': exc.message}), 503
    return jsonify({'status': 'ok'})
