from flask import Blueprint, jsonify, current_app

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Battleship Bingo game server'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'backend': current_app.extensions['game_store'].backend})
