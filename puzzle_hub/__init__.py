"""
Family Puzzles Server Application Package

A Flask + Socket.IO server hosting three word games, Connections-style
grouping, Wordle and Quordle, with shared player profiles, result storage
and leaderboards.
"""

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from .config import Config
from .context import EXTENSION_KEY, build_context


def create_app(config_class=Config, context=None):
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config_class: Configuration class to use
        context: Prebuilt AppContext; built from config_class when omitted

    Returns:
        Tuple of (Flask application, SocketIO instance)
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app)
    socketio = SocketIO(app, cors_allowed_origins="*", logger=False, engineio_logger=False)

    if context is None:
        context = build_context(config_class)
    app.extensions[EXTENSION_KEY] = context

    # Register blueprints
    from .controllers.admin_controller import admin_bp
    from .controllers.auth_controller import auth_bp
    from .controllers.game_controller import game_bp
    from .controllers.health_controller import health_bp
    from .controllers.profile_controller import profile_bp
    from .controllers.stats_controller import stats_bp

    app.register_blueprint(auth_bp, url_prefix='/api/admin/auth')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(game_bp, url_prefix='/api')
    app.register_blueprint(profile_bp, url_prefix='/api')
    app.register_blueprint(stats_bp, url_prefix='/api')
    app.register_blueprint(health_bp, url_prefix='/api')

    # Register WebSocket handlers
    from .websocket.handlers import register_websocket_handlers
    register_websocket_handlers(socketio, context)

    app.socketio = socketio

    return app, socketio
