from flask import Blueprint, jsonify, request, current_app
from bingo.services.games.records import (
    create_game as svc_create_game,
    fetch_game as svc_fetch_game,
    update_game as svc_update_game,
    list_games as svc_list_games,
    verify_admin_password as svc_verify_admin_password,
    team_links as svc_team_links,
)
from bingo.services.games.team_state import (
    fetch_team_state as svc_fetch_team_state,
    replace_team_state as svc_replace_team_state,
)


games = Blueprint('games', __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@games.route('', methods=['POST'])
def create_game():
    data = _json_body()
    game_id = svc_create_game(data.get('gameId'), data.get('gameData'))
    return jsonify({'success': True, 'gameId': game_id})


@games.route('', methods=['GET'])
def list_games():
    return jsonify(svc_list_games())


@games.route('/<string:game_id>', methods=['GET'])
def get_game(game_id):
    return jsonify(svc_fetch_game(game_id))


@games.route('/<string:game_id>', methods=['PUT'])
def update_game(game_id):
    data = _json_body()
    svc_update_game(game_id, data.get('gameData'))
    return jsonify({'success': True})


@games.route('/<string:game_id>/team/<string:team_id>/state', methods=['GET'])
def get_team_state(game_id, team_id):
    return jsonify(svc_fetch_team_state(game_id, team_id))


@games.route('/<string:game_id>/team/<string:team_id>/state', methods=['PUT'])
def replace_team_state(game_id, team_id):
    data = _json_body()
    svc_replace_team_state(game_id, team_id, data.get('markedTiles'))
    return jsonify({'success': True})


@games.route('/<string:game_id>/admin/verify', methods=['POST'])
def verify_admin(game_id):
    data = _json_body()
    valid = svc_verify_admin_password(game_id, data.get('password'))
    return jsonify({'valid': valid})


@games.route('/<string:game_id>/links', methods=['GET'])
def get_team_links(game_id):
    base_url = current_app.config.get('PUBLIC_BASE_URL') or request.host_url
    return jsonify(svc_team_links(game_id, base_url))
