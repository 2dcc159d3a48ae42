"""Authorization decorators to prevent unauthorized resource access"""
from functools import wraps
from flask import jsonify
from flask_login import current_user


def storefront_required(f):
    """
    Decorator to load the current user's storefront.
    Must be applied after login_required. Passes 'storefront' to the route.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        storefront = current_user.storefront
        if not storefront:
            return jsonify({'success': False, 'error': 'Storefront not found'}), 404

        kwargs['storefront'] = storefront
        return f(*args, **kwargs)
    return decorated_function
