"""
Game Controller

Handles the HTTP endpoints of a play-through: starting a session, reading
its state and every player operation on it.
"""

from flask import Blueprint, request, jsonify
from ..context import get_context
from ..models.game import Variant
from ..services.session import ShowMessage
from ..utils.game_logger import game_logger
from .responses import error_response, json_body, messages_payload

game_bp = Blueprint('game', __name__)


@game_bp.route('/sessions', methods=['POST'])
def create_session():
    """Start playing a stored puzzle."""
    try:
        data = json_body()
        puzzle_id = str(data.get('puzzle_id') or '').strip()
        player_id = data.get('player_id')

        game_logger.log_user_action(
            request, 'create_session',
            variant=data.get('variant'), puzzle_id=puzzle_id, player_id=player_id
        )

        variant = Variant.parse(data.get('variant'))
        if not puzzle_id:
            raise ValueError('puzzle_id is required')

        games = get_context().games
        session_id, messages = games.create_session(variant, puzzle_id, player_id)

        response_data = {
            'success': True,
            'session_id': session_id,
            'messages': messages_payload(messages),
            'state': games.describe(session_id)
        }
        game_logger.log_server_response(request, 'create_session', True, response_data, session_id)
        return jsonify(response_data), 201

    except Exception as e:
        return error_response('create_session', e)


@game_bp.route('/sessions/<session_id>', methods=['GET'])
def get_state(session_id):
    """Get the current session view."""
    try:
        game_logger.log_user_action(request, 'get_state', session_id)

        response_data = {
            'success': True,
            'state': get_context().games.describe(session_id)
        }
        game_logger.log_server_response(request, 'get_state', True, response_data, session_id)
        return jsonify(response_data)

    except Exception as e:
        return error_response('get_state', e, session_id)


@game_bp.route('/sessions/<session_id>/guess', methods=['POST'])
def submit_guess(session_id):
    """
    Submit a guess.

    Letter games send {"guess": "CRANE"}. Grouping sessions submit the
    pending selection, or an explicit {"words": [...]} list.
    """
    try:
        data = json_body()
        guess = data.get('words') if 'words' in data else data.get('guess')

        game_logger.log_user_action(request, 'submit_guess', session_id, guess=guess)

        games = get_context().games
        turn = games.submit(session_id, guess)

        response_data = {
            'success': True,
            'accepted': turn.accepted,
            'rejected': not turn.accepted,
            'reason': turn.reason,
            'messages': messages_payload(m for m in turn.effects if isinstance(m, ShowMessage)),
            'state': games.describe(session_id)
        }
        game_logger.log_server_response(
            request, 'submit_guess', True, response_data, session_id,
            accepted=turn.accepted
        )
        return jsonify(response_data)

    except Exception as e:
        return error_response('submit_guess', e, session_id)


@game_bp.route('/sessions/<session_id>/toggle', methods=['POST'])
def toggle_word(session_id):
    """Select or deselect one word of a grouping board."""
    try:
        data = json_body()
        word = data.get('word')
        game_logger.log_user_action(request, 'toggle_word', session_id, word=word)

        if not word:
            raise ValueError('word is required')

        games = get_context().games
        games.toggle(session_id, word)

        response_data = {'success': True, 'state': games.describe(session_id)}
        game_logger.log_server_response(request, 'toggle_word', True, response_data, session_id)
        return jsonify(response_data)

    except Exception as e:
        return error_response('toggle_word', e, session_id)


@game_bp.route('/sessions/<session_id>/shuffle', methods=['POST'])
def shuffle_words(session_id):
    """Reorder the remaining words."""
    try:
        game_logger.log_user_action(request, 'shuffle', session_id)

        games = get_context().games
        games.shuffle(session_id)

        response_data = {'success': True, 'state': games.describe(session_id)}
        game_logger.log_server_response(request, 'shuffle', True, response_data, session_id)
        return jsonify(response_data)

    except Exception as e:
        return error_response('shuffle', e, session_id)


@game_bp.route('/sessions/<session_id>/deselect', methods=['POST'])
def deselect_all(session_id):
    """Clear the pending selection."""
    try:
        game_logger.log_user_action(request, 'deselect_all', session_id)

        games = get_context().games
        games.deselect_all(session_id)

        response_data = {'success': True, 'state': games.describe(session_id)}
        game_logger.log_server_response(request, 'deselect_all', True, response_data, session_id)
        return jsonify(response_data)

    except Exception as e:
        return error_response('deselect_all', e, session_id)


@game_bp.route('/sessions/<session_id>/reload', methods=['POST'])
def play_again(session_id):
    """Play the same puzzle again from scratch."""
    try:
        game_logger.log_user_action(request, 'play_again', session_id)

        games = get_context().games
        messages = games.reload(session_id)

        response_data = {
            'success': True,
            'messages': messages_payload(messages),
            'state': games.describe(session_id)
        }
        game_logger.log_server_response(request, 'play_again', True, response_data, session_id)
        return jsonify(response_data)

    except Exception as e:
        return error_response('play_again', e, session_id)


@game_bp.route('/sessions/<session_id>', methods=['DELETE'])
def close_session(session_id):
    """Discard a session when the player navigates away."""
    try:
        game_logger.log_user_action(request, 'close_session', session_id)

        if not get_context().games.close_session(session_id):
            response_data = {'success': False, 'error': 'Session not found'}
            game_logger.log_server_response(request, 'close_session', False, response_data, session_id)
            return jsonify(response_data), 404

        response_data = {'success': True, 'message': 'Session closed'}
        game_logger.log_server_response(request, 'close_session', True, response_data, session_id)
        return jsonify(response_data)

    except Exception as e:
        return error_response('close_session', e, session_id)
