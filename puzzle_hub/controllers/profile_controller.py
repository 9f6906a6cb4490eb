"""
Profile Controller

Handles the player list: pick an existing profile or create a new one.
"""

from flask import Blueprint, request, jsonify
from ..context import get_context
from ..utils.game_logger import game_logger
from .responses import error_response, json_body

profile_bp = Blueprint('profile', __name__)


@profile_bp.route('/players', methods=['GET'])
def list_players():
    """All player profiles."""
    try:
        players = get_context().profiles.list_players()
        return jsonify({
            'success': True,
            'players': [p.to_dict() for p in players]
        })

    except Exception as e:
        return error_response('list_players', e)


@profile_bp.route('/players', methods=['POST'])
def create_player():
    """Create a profile from a display name."""
    try:
        data = json_body()
        name = data.get('name')

        game_logger.log_user_action(request, 'create_player', name=name)

        profile = get_context().profiles.create_player(name)

        response_data = {'success': True, 'player': profile.to_dict()}
        game_logger.log_server_response(request, 'create_player', True, response_data)
        return jsonify(response_data), 201

    except Exception as e:
        return error_response('create_player', e)


@profile_bp.route('/players/<user_id>', methods=['GET'])
def get_player(user_id):
    """One player profile."""
    try:
        profile = get_context().profiles.get_player(user_id)
        if profile is None:
            return jsonify({
                'success': False,
                'error': 'Player not found'
            }), 404

        return jsonify({'success': True, 'player': profile.to_dict()})

    except Exception as e:
        return error_response('get_player', e)
