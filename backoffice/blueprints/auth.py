from flask import (
    Blueprint,
    request,
    jsonify,
    redirect,
    url_for,
)
from flask_login import (
    login_user,
    logout_user,
    login_required,
    current_user,
)
from backoffice.extensions import db
from backoffice.models import User
from backoffice.services.audit_service import log_audit
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__)


@bp.route('/api/auth/login', methods=['POST'])
@bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'GET':
        if current_user.is_authenticated:
            return redirect(url_for('return_requests.index'))
        return jsonify({'message': 'Please use POST method to login'})

    data = request.get_json(silent=True) or request.form
    email = (data.get('email') or '').strip()
    password = data.get('password') or ''

    if not email or not password:
        return jsonify({'error': 'Email and password cannot be empty'}), 400

    user = User.query.filter_by(email=email).first()

    if user and user.check_password(password) and user.is_active:
        login_user(user, remember=True)
        user.last_login_at = datetime.utcnow()
        db.session.commit()

        log_audit(
            actor_id=user.id,
            actor_role=user.role.value,
            action='LOGIN_SUCCESS',
            target_type='USER',
            target_id=user.id,
            payload={'event': 'login_success'}
        )
        return jsonify(
            {'ok': True, 'role': user.role.value, 'user_id': user.id})

    log_audit(
        actor_id=None,
        actor_role='ANONYMOUS',
        action='LOGIN_FAILED',
        target_type='USER',
        target_id=None,
        payload={
            'reason': 'invalid_credentials' if user else 'user_not_found'})
    return jsonify({'error': 'Invalid email or password'}), 401


@bp.route('/api/auth/logout', methods=['POST'])
@bp.route('/logout', methods=['POST'])
@login_required
def logout():
    user_id = current_user.id
    role = current_user.role.value

    log_audit(
        actor_id=user_id,
        actor_role=role,
        action='LOGOUT',
        target_type='USER',
        target_id=user_id
    )

    logout_user()
    return jsonify({'ok': True})
