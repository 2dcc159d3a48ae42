"""Authentication blueprint"""
from flask import Blueprint, current_app, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from menucraft.models import User
from menucraft.extensions import limiter
from menucraft.utils.security import validate_redirect_url

bp = Blueprint('auth', __name__)


@bp.route('/login', methods=['POST'])
@limiter.limit("5 per minute")
def login():
    """Log in with username and password (JSON or form)"""
    if current_user.is_authenticated:
        return jsonify({'success': True, 'username': current_user.username})

    data = request.get_json(silent=True) if request.is_json else request.form
    data = data or {}
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    remember = data.get('remember', False)

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        return jsonify({'success': False, 'error': 'Invalid username or password'}), 401

    login_user(user, remember=bool(remember))

    result = {'success': True, 'username': user.username}
    # Validate next parameter to prevent open redirect vulnerability
    next_page = request.args.get('next')
    if next_page and validate_redirect_url(next_page, current_app.config['REDIRECT_ALLOWED_HOSTS']):
        result['redirect'] = next_page
    return jsonify(result)


@bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Log out the current user"""
    logout_user()
    return jsonify({'success': True})
