from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

from planning_poker.session_registry import SessionRegistry

registry = SessionRegistry()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    # Fresh in-memory session store for this app
    registry.init_app(flask_app)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from planning_poker.main import main
    flask_app.register_blueprint(main)

    from planning_poker.api.sessions import sessions
    # Mount under /api to match the frontend API client
    flask_app.register_blueprint(sessions, url_prefix='/api')

    # Register Socket.IO event handlers
    # Importing here ensures the handlers bind to the initialized socketio instance
    from planning_poker.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    return flask_app
