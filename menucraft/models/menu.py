"""MenuItem model"""
from datetime import datetime
from menucraft.extensions import db

LINK_TYPES = ('page', 'section', 'external')


class MenuItem(db.Model):
    """Represents one entry of a storefront navigation menu (hierarchical)"""
    __tablename__ = 'menu_items'

    id = db.Column(db.Integer, primary_key=True)
    storefront_id = db.Column(db.Integer, db.ForeignKey('storefronts.id'), nullable=False, index=True)
    parent_id = db.Column(db.Integer, db.ForeignKey('menu_items.id'), nullable=True)
    label = db.Column(db.String(50), nullable=False)
    link_type = db.Column(db.String(20), default='page')  # page, section, external
    target = db.Column(db.String(500), nullable=False)  # page slug, anchor id or absolute URL
    sort_order = db.Column(db.Integer, default=0, nullable=False)
    is_visible = db.Column(db.Boolean, default=True)
    show_dropdown = db.Column(db.Boolean, default=False)
    embed_company_profile = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<MenuItem {self.label}>'

    def to_dict(self):
        """Convert menu item to dictionary"""
        return {
            'id': self.id,
            'parent_id': self.parent_id,
            'label': self.label,
            'link_type': self.link_type,
            'target': self.target,
            'sort_order': self.sort_order,
            'is_visible': bool(self.is_visible),
            'show_dropdown': bool(self.show_dropdown),
            'embed_company_profile': bool(self.embed_company_profile)
        }
