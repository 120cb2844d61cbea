# paintquote/routes/auth.py
from flask import Blueprint, request, jsonify, session
from flask_login import login_user, logout_user, login_required, current_user
from datetime import datetime
import logging

from paintquote.models import db, User

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


def create_error_response(message, status_code):
    return jsonify({
        'error': message,
        'status_code': status_code,
        'timestamp': datetime.utcnow().isoformat()
    }), status_code


@auth_bp.route('/login', methods=['POST'])
def login():
    """Log a user in with email and password"""
    data = request.get_json(silent=True)
    if not data:
        logger.warning("Login request with no JSON data")
        return create_error_response("No data provided", 400)

    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    if not email or not password:
        return create_error_response("Email and password are required", 400)

    try:
        user = User.query.filter_by(email=email).first()

        if not user or not user.check_password(password):
            logger.warning(f"Login failed for '{email}'")
            return create_error_response("Invalid email or password", 401)

        if not user.is_active:
            logger.warning(f"Login failed: user '{email}' is inactive")
            return create_error_response("Account is disabled", 401)

        user.last_login = datetime.utcnow()
        db.session.commit()

        login_user(user, remember=True)
        logger.info(f"Login successful for user '{email}' (ID: {user.id})")

        return jsonify({
            'message': 'Login successful',
            'user': user.to_dict(),
            'timestamp': datetime.utcnow().isoformat()
        }), 200

    except Exception as e:
        db.session.rollback()
        logger.error(f"Unexpected login error: {e}")
        return create_error_response("Login failed due to server error", 500)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Log the current user out; always succeeds"""
    was_authenticated = current_user.is_authenticated
    user_info = f"{current_user.email} (ID: {current_user.id})" if was_authenticated else "anonymous"

    session.clear()
    logout_user()
    logger.info(f"Logout completed for user: {user_info}")

    return jsonify({
        'message': 'Logout successful',
        'success': True,
        'was_authenticated': was_authenticated,
        'timestamp': datetime.utcnow().isoformat()
    }), 200


@auth_bp.route('/me', methods=['GET'])
@login_required
def get_current_user():
    data = current_user.to_dict()
    data['tenant'] = current_user.tenant.to_dict() if current_user.tenant else None
    return jsonify(data)
