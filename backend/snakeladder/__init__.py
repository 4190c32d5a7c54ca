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

REGISTRY_KEY = 'snakeladder.rooms'


def get_registry(flask_app):
    return flask_app.extensions[REGISTRY_KEY]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Room state lives on the app, one registry per application instance
    from snakeladder.services.games import RoomRegistry
    flask_app.extensions[REGISTRY_KEY] = RoomRegistry(
        min_players=flask_app.config.get('MIN_PLAYERS', 2),
    )

    from snakeladder.routes import main
    flask_app.register_blueprint(main)

    from snakeladder.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from snakeladder.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    @click.command('board')
    def board_command():
        """Prints the snake and ladder table."""
        from snakeladder.services.games.board import SNAKES, LADDERS
        for start, end in sorted(SNAKES.items()):
            click.echo(f'snake  {start:>3} -> {end:>3}')
        for start, end in sorted(LADDERS.items()):
            click.echo(f'ladder {start:>3} -> {end:>3}')

    flask_app.cli.add_command(board_command)

    return flask_app
