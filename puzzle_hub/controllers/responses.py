"""
Controller Responses

JSON reply helpers shared by the blueprints.
"""

from flask import request, jsonify
from ..errors import PuzzleHubError, http_status
from ..utils.game_logger import game_logger


def messages_payload(messages):
    return [{'text': m.text, 'kind': m.kind, 'duration_ms': m.duration_ms} for m in messages]


def error_response(action, error, session_id=None):
    """Logs a failed action and builds the JSON error reply."""
    game_logger.log_error(request, error, action, session_id)
    response = {
        'success': False,
        'error': error.message if isinstance(error, PuzzleHubError) else str(error)
    }
    game_logger.log_server_response(request, action, False, response, session_id)
    return jsonify(response), http_status(error)


def json_body():
    """The request's JSON object, or an empty dict for anything else."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
