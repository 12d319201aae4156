from flask import Blueprint, current_app, jsonify


rooms = Blueprint('rooms', __name__)


def _registry():
    return current_app.extensions['zombie_lane'].registry


@rooms.route('', methods=['GET'])
@rooms.route('/', methods=['GET'])
def list_rooms():
    """
    Lobby listing: this server, its host and the player count of every room.
    """
    return jsonify(_registry().summary()), 200


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room(room_id):
    """
    Returns the current map snapshot of one room.
    """
    snapshot = _registry().get_room_snapshot(room_id)
    if snapshot is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(snapshot), 200
