from conftest import ScriptedRandom


def _events(sio_client, name):
    return [pkt['args'][0] for pkt in sio_client.get_received('/ws') if pkt['name'] == name]


def _registry(flask_app):
    return flask_app.extensions['zombie_lane'].registry


def test_socket_connect(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'connected' for pkt in received)


def test_join_room_reports_map_and_rooms(sio_client):
    sio_client.get_received('/ws')  # flush

    sio_client.emit('join_room', {'room_id': 'R1', 'username': 'Alice'}, namespace='/ws')
    received = sio_client.get_received('/ws')

    maps = [pkt['args'][0] for pkt in received if pkt['name'] == 'map']
    assert len(maps) == 1
    assert maps[0]['room_id'] == 'R1'
    assert maps[0]['zombies'] == []
    assert [c['username'] for c in maps[0]['clients']] == ['Alice']
    changed = [pkt['args'][0] for pkt in received if pkt['name'] == 'rooms_changed']
    assert changed[-1]['rooms'] == [{'room_id': 'R1', 'num_players': 1}]


def test_join_room_requires_room_id(flask_app, sio_client):
    sio_client.get_received('/ws')

    sio_client.emit('join_room', {'username': 'Alice'}, namespace='/ws')

    assert _events(sio_client, 'error') == [{'message': 'room_id is required'}]
    assert _registry(flask_app).room_ids() == []


def test_tick_and_shot_flow(flask_app, sio_client):
    registry = _registry(flask_app)
    registry.rng = ScriptedRandom(randoms=[0.0], row=2)
    sio_client.emit('join_room', {'room_id': 'R1', 'username': 'Alice'}, namespace='/ws')
    sio_client.emit('start_game', namespace='/ws')
    sio_client.get_received('/ws')

    registry.advance()
    maps = _events(sio_client, 'map')
    assert len(maps) == 1
    assert maps[0]['total_ticks'] == 1
    zombie = maps[0]['zombies'][0]
    assert (zombie['x'], zombie['y']) == (31, 2)

    sio_client.emit('shoot', {'point': {'x': 31, 'y': 2}}, namespace='/ws')
    assert _events(sio_client, 'zombie_hit') == [{'zombie_id': zombie['id'], 'killed': False}]

    sio_client.emit('shoot', {'x': 31, 'y': 2}, namespace='/ws')
    assert _events(sio_client, 'zombie_hit') == [{'zombie_id': zombie['id'], 'killed': True}]
    assert registry.get_room_snapshot('R1')['zombies'] == []


def test_shoot_rejects_bad_point(sio_client):
    sio_client.emit('join_room', {'room_id': 'R1'}, namespace='/ws')
    sio_client.get_received('/ws')

    sio_client.emit('shoot', {'point': {'x': 'left'}}, namespace='/ws')

    assert len(_events(sio_client, 'error')) == 1


def test_disconnect_freezes_room(flask_app, sio_client):
    sio_client.emit('join_room', {'room_id': 'R1', 'username': 'Alice'}, namespace='/ws')

    sio_client.disconnect(namespace='/ws')

    room = _registry(flask_app).get_room_snapshot('R1')
    assert room['is_frozen'] is True
    assert room['clients'] == []


def test_list_rooms(flask_app, sio_client):
    _registry(flask_app).handle_join('other', 'Bob', 'R9')
    sio_client.get_received('/ws')

    sio_client.emit('list_rooms', namespace='/ws')

    rooms = _events(sio_client, 'rooms')
    assert rooms[0]['rooms'] == [{'room_id': 'R9', 'num_players': 1}]


def test_shoot_requires_exact_integer_cells(flask_app, sio_client):
    registry = _registry(flask_app)
    registry.rng = ScriptedRandom(randoms=[0.0], row=2)
    sio_client.emit('join_room', {'room_id': 'R1', 'username': 'Alice'}, namespace='/ws')
    sio_client.emit('start_game', namespace='/ws')
    registry.advance()
    sio_client.get_received('/ws')

    for point in ({'x': 31.9, 'y': 2.7}, {'x': 31.0, 'y': 2}, {'x': '31', 'y': '2'}, {'x': True, 'y': 2}):
        sio_client.emit('shoot', {'point': point}, namespace='/ws')
        received = sio_client.get_received('/ws')
        assert [pkt['name'] for pkt in received] == ['error']

    assert registry.get_room_snapshot('R1')['zombies'][0]['health'] == 100


def test_non_dict_payloads_get_error_reply(flask_app, sio_client):
    sio_client.get_received('/ws')

    for event, payload in (('join_room', ['R1']), ('join_room', 'R1'), ('shoot', [31, 2]), ('shoot', 'x')):
        sio_client.emit(event, payload, namespace='/ws')
        assert len(_events(sio_client, 'error')) == 1

    assert _registry(flask_app).room_ids() == []
