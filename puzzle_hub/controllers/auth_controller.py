"""
Authentication Controller

Handles admin login, token verification and logout.
"""

from flask import Blueprint, request, jsonify
from ..context import get_context
from ..utils.decorators import bearer_token
from ..utils.game_logger import game_logger
from .responses import error_response, json_body

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Login an admin and return a JWT token."""
    try:
        data = json_body()
        if not data:
            return jsonify({
                'success': False,
                'error': 'Request body is required'
            }), 400

        username = data.get('username')
        password = data.get('password')

        game_logger.log_user_action(request, 'admin_login', username=username)

        result = get_context().auth.login_admin(username, password)

        if result['success']:
            game_logger.log_server_response(request, 'admin_login', True, result)
            return jsonify(result)
        else:
            game_logger.log_server_response(request, 'admin_login', False, result)
            return jsonify(result), 401

    except Exception as e:
        return error_response('admin_login', e)


@auth_bp.route('/verify', methods=['GET'])
def verify():
    """Report whether the caller holds an active admin session."""
    try:
        token = bearer_token()
        if not token:
            return jsonify({
                'success': False,
                'error': 'Authorization token required'
            }), 401

        result = get_context().auth.verify_token(token)
        return jsonify(result), (200 if result['success'] else 401)

    except Exception as e:
        return error_response('admin_verify', e)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """End the admin session."""
    try:
        token = bearer_token()
        if not token:
            return jsonify({
                'success': False,
                'error': 'Authorization token required'
            }), 401

        game_logger.log_user_action(request, 'admin_logout')

        result = get_context().auth.logout_admin(token)

        if result['success']:
            game_logger.log_server_response(request, 'admin_logout', True, result)
            return jsonify(result)
        else:
            game_logger.log_server_response(request, 'admin_logout', False, result)
            return jsonify(result), 401

    except Exception as e:
        return error_response('admin_logout', e)
