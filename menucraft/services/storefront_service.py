"""Storefront service for storefront creation and lookup"""
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from menucraft.extensions import db
from menucraft.models.storefront import Storefront
from menucraft.utils.security import strip_html
from menucraft.utils.validators import generate_slug


class StorefrontService:
    """Service for handling storefront-related operations"""

    @staticmethod
    def unique_slug(name):
        """
        Generate a storefront slug that is not taken yet.

        Args:
            name (str): Storefront display name

        Returns:
            str: "acme", or "acme-1", "acme-2"... on collision
        """
        base_slug = generate_slug(name)
        slug = base_slug
        count = 1
        while Storefront.query.filter_by(slug=slug).first():
            slug = f'{base_slug}-{count}'
            count += 1
        return slug

    @staticmethod
    def create_storefront(user, name):
        """
        Create the storefront of a user (one per user).

        Returns:
            tuple: (storefront, error_message)
        """
        name = strip_html(name if isinstance(name, str) else '')
        if not name:
            return None, "Name required"
        if len(name) > 100:
            return None, "Name must be 100 characters or less"
        if user.storefront:
            return None, "You already have a storefront"

        storefront = Storefront(owner_id=user.id, name=name, slug=StorefrontService.unique_slug(name))
        db.session.add(storefront)
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to create storefront for user {user.id}: {e}")
            return None, "Could not create storefront, please try again"

        current_app.logger.info(f"Created storefront {storefront.slug} for user {user.id}")
        return storefront, None

    @staticmethod
    def set_active(storefront, is_active):
        """Publish or unpublish a storefront"""
        storefront.is_active = bool(is_active)
        db.session.commit()
        return storefront
