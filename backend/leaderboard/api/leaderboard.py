from flask import Blueprint, current_app, jsonify, request

from leaderboard import get_leaderboard_service

leaderboard = Blueprint('leaderboard', __name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@leaderboard.route('/users', methods=['GET'])
def list_users():
    players = get_leaderboard_service().list_players()
    return jsonify([p.to_dict() for p in players])


@leaderboard.route('/users', methods=['POST'])
def register_user():
    data = _json_body()
    player = get_leaderboard_service().register_player(data.get('username'))
    return jsonify(player.to_dict()), 201


@leaderboard.route('/claim-points', methods=['POST'])
def claim_points():
    data = _json_body()
    result = get_leaderboard_service().claim_points(data.get('userId'))
    return jsonify(result.to_dict())


@leaderboard.route('/point-history', methods=['GET'])
def point_history():
    records = get_leaderboard_service().list_award_history()
    current_app.logger.debug(f"[history] returning {len(records)} records")
    return jsonify([r.to_dict() for r in records])
