# paintquote/middleware/auth.py

from functools import wraps
from flask import jsonify
from flask_login import current_user
import logging

logger = logging.getLogger(__name__)


def admin_required(f):
    """
    Decorator to ensure a user is logged in and has the 'admin' role.
    Place it after @login_required.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            logger.warning("Unauthenticated access attempt to an admin-only route.")
            return jsonify({'error': 'Authentication required'}), 401

        if getattr(current_user, 'role', None) != 'admin':
            logger.warning(
                f"User '{current_user.email}' (role: {getattr(current_user, 'role', 'N/A')}) "
                f"attempted to access an admin-only route."
            )
            return jsonify({'error': 'Admin access required'}), 403

        return f(*args, **kwargs)
    return decorated_function


def active_user_required(f):
    """Rejects logged-in users whose account has been disabled."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({'error': 'Authentication required'}), 401

        if not current_user.is_active:
            logger.warning(f"Inactive user '{current_user.email}' attempted to access a resource.")
            return jsonify({'error': 'Your account is disabled. Please contact an administrator.'}), 403

        return f(*args, **kwargs)
    return decorated_function
