from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from zombie_lane.main import main
    flask_app.register_blueprint(main)

    from zombie_lane.api.rooms import rooms
    # Mount room routes under /api to match frontend API client
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # One registry per app: the engine ticks it, the socket handlers feed it
    from zombie_lane.services import GameEngine, RoomRegistry, SimulationSettings
    from zombie_lane.services.simulation import make_rng
    from zombie_lane.socketio_events import SocketIOReporter, register_socketio_handlers

    registry = RoomRegistry(
        settings=SimulationSettings.from_config(flask_app.config),
        rng=make_rng(flask_app.config.get('RANDOM_SEED')),
        server_id=flask_app.config.get('SERVER_ID', 'local'),
        host_username=flask_app.config.get('HOST_USERNAME', 'host'),
    )
    registry.add_listener(SocketIOReporter(socketio))
    engine = GameEngine(flask_app, registry, socketio)
    flask_app.extensions['zombie_lane'] = engine

    # Register Socket.IO event handlers on the freshly initialized server
    register_socketio_handlers()

    # The tick loop is a process-lifetime task; tests drive ticks by hand
    if not flask_app.config.get('TESTING') or flask_app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        engine.start()

    @click.command('simulate')
    @click.option('--ticks', default=50, show_default=True, help='Number of ticks to run.')
    @click.option('--seed', default=None, type=int, help='RNG seed for a reproducible run.')
    def simulate_command(ticks, seed):
        """Runs one headless room and prints its wave progression."""
        sim = RoomRegistry(
            settings=SimulationSettings.from_config(flask_app.config),
            rng=make_rng(seed),
            timer=lambda *args: None,
        )
        sim.handle_join('cli', 'cli', 'simulation')
        sim.handle_start_game('cli')
        for _ in range(ticks):
            sim.advance()
            room = sim.get_room_snapshot('simulation')
            if room is None:
                click.echo('Game over: a zombie breached the defense line.')
                return
            click.echo(
                f"tick={room['total_ticks']:>4} spawn_rate={room['spawn_rate']:.2f} zombies={len(room['zombies'])}"
            )
        click.echo(f'Simulated {ticks} ticks.')

    flask_app.cli.add_command(simulate_command)

    return flask_app
