from flask import request, redirect, url_for, jsonify, abort
from flask_login import current_user
from functools import wraps
from backoffice.utils import wants_json_response
import logging

logger = logging.getLogger(__name__)

# Exact paths that never require login
LOGIN_WHITELIST = [
    '/login',
    '/favicon.ico',
    '/api/auth/login',
]


def is_static_file(path):
    return path.startswith('/static/')


def setup_auth_middleware(app):

    @app.before_request
    def require_login():
        path = request.path

        # Allow static files
        if is_static_file(path):
            return None

        # Allow whitelist paths
        if path in LOGIN_WHITELIST:
            return None

        # Check login status
        if not current_user.is_authenticated:
            # API requests return 401, page requests redirect to login
            if wants_json_response():
                return jsonify({'error': 'Not logged in',
                               'login_required': True}), 401
            return redirect(url_for('auth.login'))

        return None


def role_required(*allowed_roles):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                if wants_json_response():
                    return jsonify({'error': 'Not logged in'}), 401
                return redirect(url_for('auth.login'))

            # allowed_roles is a list of role names.
            if current_user.role.value not in allowed_roles:
                logger.warning(
                    "User %s attempted to access roles %s, current role: %s",
                    current_user.id,
                    allowed_roles,
                    current_user.role.value,
                )
                if wants_json_response():
                    return jsonify({'error': 'Insufficient permissions'}), 403
                abort(403)

            return f(*args, **kwargs)
        return decorated_function
    return decorator
