"""Public storefront blueprint (no authentication)"""
from flask import Blueprint, jsonify
from menucraft.services.menu_service import MenuService

bp = Blueprint('public', __name__)


@bp.route('/public/storefront/<slug>/menu', methods=['GET'])
def storefront_menu(slug):
    """Visible navigation tree of an active storefront"""
    storefront, tree = MenuService.get_public_tree(slug)
    if not storefront:
        return jsonify({'success': False, 'error': 'Storefront not found'}), 404

    return jsonify({
        'success': True,
        'storefront': {'name': storefront.name, 'slug': storefront.slug},
        'menu': tree
    })
