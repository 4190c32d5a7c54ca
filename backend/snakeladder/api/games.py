from flask import Blueprint, jsonify, current_app

from snakeladder import get_registry
from snakeladder.services.games.board import board_layout


games = Blueprint('games', __name__)


@games.route('', methods=['GET'])
def list_rooms():
    """Returns a summary of every live room."""
    registry = get_registry(current_app)
    rooms = []
    for room in registry.rooms():
        with room.lock:
            rooms.append({
                'roomId': room.id,
                'playerCount': len(room.players),
                'status': room.status,
            })
    return jsonify({'rooms': rooms})


@games.route('/board', methods=['GET'])
def get_board():
    return jsonify(board_layout())


@games.route('/<string:room_id>/state', methods=['GET'])
def get_game_state(room_id):
    """
    Returns the full state of a room, the same snapshot sockets receive.
    """
    room = get_registry(current_app).get(room_id)
    if room is None:
        return jsonify({'error': 'Game not found'}), 404
    with room.lock:
        return jsonify(room.to_dict())
