"""
Health Controller

Liveness endpoint with storage status, live session count and log stats.
"""

from flask import Blueprint, request, jsonify
from ..context import get_context
from ..utils.game_logger import game_logger

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    try:
        game_logger.log_user_action(request, 'health_check')

        context = get_context()
        storage_ok = context.store.ping()

        response_data = {
            'status': 'healthy' if storage_ok else 'degraded',
            'storage_available': storage_ok,
            'active_sessions': context.games.active_session_count(),
            'cached_words': len(context.dictionary.cache),
            'log_stats': game_logger.get_log_stats()
        }

        game_logger.log_server_response(request, 'health_check', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'health_check')
        error_response = {
            'status': 'error',
            'error': str(e)
        }
        game_logger.log_server_response(request, 'health_check', False, error_response)
        return jsonify(error_response), 500
