"""
Family Puzzles Server - Main Entry Point

Builds the application context from configuration and starts the
Flask-SocketIO server.
"""

import os

from puzzle_hub import create_app
from puzzle_hub.config import config
from puzzle_hub.context import build_context
from puzzle_hub.utils.game_logger import game_logger


def main():
    """Main function to initialize services and start the server."""
    config_class = config[os.getenv('FLASK_ENV', 'default')]
    context = None
    try:
        print("Initializing services...")
        context = build_context(config_class)
        print(f"✓ Storage backend: {config_class.STORAGE_BACKEND}")
        print(f"✓ Storage reachable: {context.store.ping()}")

        print("Creating Flask application...")
        app, socketio = create_app(config_class, context)
        print("✓ Flask application created successfully")

        game_logger.logger.info("Family Puzzles Server starting")

        print(f"\nStarting Family Puzzles Server on {config_class.HOST}:{config_class.PORT}")
        print(f"Debug mode: {config_class.DEBUG}")
        print("=" * 50)

        socketio.run(app, host=config_class.HOST, port=config_class.PORT, debug=config_class.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Family Puzzles Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise
    finally:
        if context is not None:
            context.close()


if __name__ == '__main__':
    main()
