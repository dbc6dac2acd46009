"""Auth routes."""
from flask import jsonify
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf

from quotebook.blueprints.auth import auth_bp
from quotebook.blueprints.errors import error_response
from quotebook.forms import LoginForm, json_body, validate_json
from quotebook.models import User
from quotebook.serializers import serialize_user
from quotebook.services.audit_service import AuditService


@auth_bp.route('/login', methods=['POST'])
def login():
    form = validate_json(LoginForm, json_body())
    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if user is None or not user.check_password(form.password.data):
        return error_response('Invalid email or password.', 'unauthorized', 401)
    if not user.is_active:
        return error_response('Account is disabled.', 'forbidden', 403)
    login_user(user, remember=form.remember_me.data)
    AuditService.log('auth.login', 'User', user.id, None, user.id)
    return jsonify(serialize_user(user))


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    AuditService.log('auth.logout', 'User', current_user.id, None, current_user.id)
    logout_user()
    return jsonify({'success': True})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify(serialize_user(current_user))


@auth_bp.route('/csrf-token')
def csrf_token():
    return jsonify({'csrf_token': generate_csrf()})
