"""
Authentication Decorators

Contains the decorator guarding admin-only HTTP endpoints.
"""

from functools import wraps
from flask import request, jsonify, g


def bearer_token():
    """Token from an 'Authorization: Bearer ...' header, or None."""
    auth_header = request.headers.get('Authorization')
    if not auth_header or not auth_header.startswith('Bearer '):
        return None
    return auth_header.split(' ', 1)[1]


def require_admin(f):
    """
    Decorator to require an active admin session.

    The verified admin is stored on flask.g as `admin`.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from ..context import get_context

        token = bearer_token()
        if not token:
            return jsonify({
                'success': False,
                'error': 'Authorization token required'
            }), 401

        result = get_context().auth.verify_token(token)
        if not result['success']:
            return jsonify({
                'success': False,
                'error': result['error']
            }), 401

        g.admin = result['admin']
        return f(*args, **kwargs)

    return decorated_function
