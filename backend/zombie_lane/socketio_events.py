from flask import current_app, request
from flask_socketio import emit
from zombie_lane import socketio
from zombie_lane.services.registry import RegistryListener, RoomRegistry
from typing import Any, Dict


NAMESPACE = '/ws'


class SocketIOReporter(RegistryListener):
    """Delivers registry output to Socket.IO clients.

    ``client_id`` is the client's session id on ``NAMESPACE``, so point to
    point messages go to that sid's private room.
    """

    def __init__(self, sio, namespace: str = NAMESPACE):
        self.sio = sio
        self.namespace = namespace

    def report_map(self, room: Dict[str, Any], client_id: str) -> None:
        self.sio.emit('map', room, to=client_id, namespace=self.namespace)

    def report_zombie_hit(self, client_id: str, zombie_id: int, killed: bool) -> None:
        self.sio.emit('zombie_hit', {'zombie_id': zombie_id, 'killed': killed}, to=client_id, namespace=self.namespace)

    def report_game_over(self, client_id: str, room_id: str) -> None:
        self.sio.emit('game_over', {'room_id': room_id}, to=client_id, namespace=self.namespace)

    def rooms_changed(self, summary: Dict[str, Any]) -> None:
        self.sio.emit('rooms_changed', summary, namespace=self.namespace)


def _registry() -> RoomRegistry:
    return current_app.extensions['zombie_lane'].registry


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    emit('connected', {'sid': _get_sid()})


def handle_disconnect(reason=None):
    # Dropped connections leave like an explicit quit; the room's grace period covers reconnects
    _registry().handle_leave(_get_sid())


def handle_join_room(data=None):
    if not isinstance(data, dict):
        emit('error', {'message': 'room_id is required'})
        return
    room_id = data.get('room_id')
    username = data.get('username') or 'anonymous'
    if room_id is None or room_id == '':
        emit('error', {'message': 'room_id is required'})
        return
    _registry().handle_join(_get_sid(), str(username), str(room_id))


def handle_leave_room(data=None):
    _registry().handle_leave(_get_sid())


def handle_start_game(data=None):
    _registry().handle_start_game(_get_sid())


def _point(data):
    """Extract integer (x, y) from ``{point: {x, y}}`` or ``{x, y}``; None if malformed."""
    if not isinstance(data, dict):
        return None
    point = data.get('point', data)
    if not isinstance(point, dict):
        return None
    x, y = point.get('x'), point.get('y')
    # Hits need exact cells: bools, floats and numeric strings are rejected, not coerced
    if type(x) is not int or type(y) is not int:
        return None
    return x, y


def handle_shoot(data=None):
    point = _point(data)
    if point is None:
        emit('error', {'message': 'point with integer x and y is required'})
        return
    _registry().handle_shot(_get_sid(), *point)


def handle_list_rooms(data=None):
    emit('rooms', _registry().summary())


def register_socketio_handlers(namespace: str = NAMESPACE) -> None:
    """Register Socket.IO event handlers on the game namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join_room', handle_join_room, namespace=namespace)
    socketio.on_event('leave_room', handle_leave_room, namespace=namespace)
    socketio.on_event('start_game', handle_start_game, namespace=namespace)
    socketio.on_event('shoot', handle_shoot, namespace=namespace)
    socketio.on_event('list_rooms', handle_list_rooms, namespace=namespace)
