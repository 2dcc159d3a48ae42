"""Storefront menu builder API (owner only)"""
from flask import Blueprint, request, jsonify
from flask_login import login_required
from menucraft.extensions import limiter
from menucraft.services.menu_service import MenuService
from menucraft.services.menu_tree import MenuError
from menucraft.utils.decorators import storefront_required
from menucraft.utils.validators import (
    parse_optional_id, parse_reorder_payload, validate_structure_payload
)

bp = Blueprint('menus', __name__)


def _error_response(error):
    if isinstance(error, MenuError):
        return jsonify(error.to_dict()), error.status_code
    return jsonify({'success': False, 'error': error}), 400


def _menu_payload(storefront):
    return {
        'success': True,
        'items': [item.to_dict() for item in MenuService.get_items(storefront.id)],
        'tree': MenuService.get_tree(storefront.id),
        'revision': storefront.menu_revision
    }


@bp.route('/storefront/menu', methods=['GET'])
@login_required
@storefront_required
def menu_list(storefront):
    """Get all menu items as a flat list and as a tree"""
    return jsonify(_menu_payload(storefront))


@bp.route('/storefront/menu', methods=['POST'])
@login_required
@storefront_required
@limiter.limit("30 per minute")
def menu_item_create(storefront):
    """Create a new menu item"""
    item, error = MenuService.create_item(storefront, request.get_json(silent=True))
    if error:
        return _error_response(error)

    return jsonify({'success': True, 'item': item.to_dict()}), 201


@bp.route('/storefront/menu/<int:item_id>', methods=['PUT'])
@login_required
@storefront_required
@limiter.limit("30 per minute")
def menu_item_update(storefront, item_id):
    """Update a menu item (label, type, target, visibility, parent)"""
    item, error = MenuService.update_item(storefront, item_id, request.get_json(silent=True))
    if error:
        return _error_response(error)

    return jsonify({'success': True, 'item': item.to_dict()})


@bp.route('/storefront/menu/<int:item_id>', methods=['DELETE'])
@login_required
@storefront_required
@limiter.limit("30 per minute")
def menu_item_delete(storefront, item_id):
    """Delete a menu item, promoting its children to its parent"""
    promoted, error = MenuService.delete_item(storefront, item_id)
    if error:
        return _error_response(error)

    return jsonify({
        'success': True,
        'message': 'Menu item deleted successfully',
        'promoted': promoted
    })


@bp.route('/storefront/menu/<int:item_id>/move', methods=['POST'])
@login_required
@storefront_required
@limiter.limit("60 per minute")
def menu_item_move(storefront, item_id):
    """Drag-and-drop: move an item under another item (or top level)"""
    data = request.get_json(silent=True) or {}

    if 'parent_id' not in data:
        return jsonify({'success': False, 'error': 'parent_id is required'}), 400
    parent_id, error = parse_optional_id(data['parent_id'])
    if error:
        return jsonify({'success': False, 'error': 'Invalid parent menu item'}), 400

    sort_order = data.get('sort_order')
    if sort_order is not None and (isinstance(sort_order, bool) or not isinstance(sort_order, int)):
        return jsonify({'success': False, 'error': 'Sort order must be an integer'}), 400

    item, error = MenuService.reparent_item(storefront, item_id, parent_id, sort_order)
    if error:
        return _error_response(error)

    return jsonify({'success': True, 'item': item.to_dict()})


@bp.route('/storefront/menu/<int:item_id>/promote', methods=['POST'])
@login_required
@storefront_required
@limiter.limit("60 per minute")
def menu_item_promote(storefront, item_id):
    """Move an item to the top level"""
    item, error = MenuService.promote_item(storefront, item_id)
    if error:
        return _error_response(error)

    return jsonify({'success': True, 'item': item.to_dict()})


@bp.route('/storefront/menu/reorder', methods=['POST'])
@login_required
@storefront_required
@limiter.limit("60 per minute")
def menu_reorder(storefront):
    """Reorder one sibling group"""
    ids, error = parse_reorder_payload(request.get_json(silent=True))
    if error:
        return _error_response(error)

    items, error = MenuService.reorder_items(storefront, ids)
    if error:
        return _error_response(error)

    return jsonify({
        'success': True,
        'message': 'Menu items reordered successfully',
        'items': [item.to_dict() for item in items]
    })


@bp.route('/storefront/menu/structure', methods=['PUT'])
@login_required
@storefront_required
@limiter.limit("30 per minute")
def menu_structure(storefront):
    """Replace parent links and sibling order in one validated step"""
    entries, expected_revision, error = validate_structure_payload(request.get_json(silent=True))
    if error:
        return _error_response(error)

    _, error = MenuService.apply_structure(storefront, entries, expected_revision)
    if error:
        return _error_response(error)

    return jsonify(_menu_payload(storefront))


@bp.route('/storefront/menu/parent-options', methods=['GET'])
@login_required
@storefront_required
def menu_parent_options(storefront):
    """Legal parent choices for an item (all items when creating)"""
    item_id, error = parse_optional_id(request.args.get('item_id'))
    if error:
        return jsonify({'success': False, 'error': 'Invalid menu item id'}), 400

    return jsonify({
        'success': True,
        'options': MenuService.get_parent_options(storefront.id, item_id)
    })
