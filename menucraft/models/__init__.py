"""Models package - exports all models for easy importing"""
from menucraft.models.user import User
from menucraft.models.storefront import Storefront
from menucraft.models.menu import MenuItem, LINK_TYPES

__all__ = [
    'User',
    'Storefront',
    'MenuItem',
    'LINK_TYPES'
]
