"""
WebSocket Event Handlers

Clients watch a session by joining its room; every state change of that
session is pushed to the room as a 'session_state' event.
"""

from flask import request
from flask_socketio import emit, join_room, leave_room
from ..errors import NotFoundError
from ..utils.game_logger import game_logger


def register_websocket_handlers(socketio, context):
    """Register all WebSocket event handlers."""

    def push_state(session_id, view):
        socketio.emit('session_state', view, room=session_id)

    context.games.add_listener(push_state)

    @socketio.on('connect')
    def handle_connect():
        """Handle WebSocket connection."""
        pass

    @socketio.on('watch_session')
    def handle_watch_session(data):
        """Subscribe to a session's state updates."""
        session_id = (data or {}).get('session_id')
        if not session_id:
            emit('error', {'error': 'Session ID is required'})
            return

        try:
            view = context.games.describe(session_id)
        except NotFoundError as e:
            emit('error', {'error': e.message})
            return

        join_room(session_id)
        game_logger.log_game_event(session_id, 'session_watched', socket_id=request.sid)
        emit('session_state', view)

    @socketio.on('unwatch_session')
    def handle_unwatch_session(data):
        """Stop receiving a session's updates."""
        session_id = (data or {}).get('session_id')
        if not session_id:
            emit('error', {'error': 'Session ID is required'})
            return

        leave_room(session_id)
        emit('unwatched', {'session_id': session_id})
