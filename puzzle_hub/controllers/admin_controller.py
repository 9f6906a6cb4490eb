"""
Admin Controller

Puzzle authoring endpoints. Every route needs an active admin session.
"""

from flask import Blueprint, request, jsonify, g
from ..context import get_context
from ..models.game import Variant
from ..utils.decorators import require_admin
from ..utils.game_logger import game_logger
from .responses import error_response, json_body

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/<variant>/puzzles', methods=['POST'])
@require_admin
def create_puzzle(variant):
    """Validate and save a new puzzle; returns its shareable id."""
    try:
        data = json_body()
        created_by = (data.get('createdBy') or '').strip() or g.admin['username']

        game_logger.log_user_action(request, 'create_puzzle', variant=variant, created_by=created_by)

        game = Variant.parse(variant)
        puzzle_id = get_context().authoring.create_puzzle(game, data, created_by)

        response_data = {
            'success': True,
            'variant': game.value,
            'puzzle_id': puzzle_id,
            'created_by': created_by
        }
        game_logger.log_server_response(request, 'create_puzzle', True, response_data)
        return jsonify(response_data), 201

    except Exception as e:
        return error_response('create_puzzle', e)


@admin_bp.route('/words/<word>', methods=['GET'])
@require_admin
def check_word(word):
    """Dictionary check used while authoring letter puzzles."""
    try:
        valid = get_context().dictionary.check(word)
        return jsonify({'success': True, 'word': word.upper(), 'valid': valid})

    except Exception as e:
        return error_response('check_word', e)
