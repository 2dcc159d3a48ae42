"""API blueprint for CSRF tokens and the owner's storefront"""
from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from flask_wtf.csrf import generate_csrf
from menucraft.extensions import limiter
from menucraft.services.storefront_service import StorefrontService
from menucraft.utils.decorators import storefront_required

bp = Blueprint('api', __name__)


@bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    """Token for the X-CSRFToken header of state-changing requests"""
    return jsonify({'csrf_token': generate_csrf()})


@bp.route('/storefront', methods=['GET'])
@login_required
@storefront_required
def storefront_detail(storefront):
    """Get the current user's storefront"""
    return jsonify({'success': True, 'storefront': storefront.to_dict()})


@bp.route('/storefront', methods=['POST'])
@login_required
@limiter.limit("10 per minute")
def storefront_create():
    """Create the current user's storefront"""
    data = request.get_json(silent=True) or {}

    storefront, error = StorefrontService.create_storefront(current_user, data.get('name'))
    if error:
        return jsonify({'success': False, 'error': error}), 400

    return jsonify({'success': True, 'storefront': storefront.to_dict()}), 201


@bp.route('/storefront', methods=['PUT'])
@login_required
@storefront_required
@limiter.limit("30 per minute")
def storefront_update(storefront):
    """Publish or unpublish the storefront"""
    data = request.get_json(silent=True) or {}

    if 'is_active' in data:
        if not isinstance(data['is_active'], bool):
            return jsonify({'success': False, 'error': 'is_active must be true or false'}), 400
        StorefrontService.set_active(storefront, data['is_active'])

    return jsonify({'success': True, 'storefront': storefront.to_dict()})
