from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    engine = current_app.extensions['zombie_lane']
    return jsonify({
        'message': 'Welcome to the Zombie Lane game server!',
        'server_id': engine.registry.server_id,
        'engine_running': engine.running,
    })
