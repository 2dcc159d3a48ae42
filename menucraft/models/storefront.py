"""Storefront model"""
from datetime import datetime
from menucraft.extensions import db


class Storefront(db.Model):
    """Represents a seller storefront, the owner of one navigation menu"""
    __tablename__ = 'storefronts'

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(120), unique=True, nullable=False)
    is_active = db.Column(db.Boolean, default=True)
    menu_revision = db.Column(db.Integer, default=0, nullable=False)  # Bumped on every menu mutation
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = db.relationship('User', back_populates='storefront')
    menu_items = db.relationship('MenuItem', backref='storefront', lazy=True, cascade='all, delete-orphan')

    @classmethod
    def get_active_by_slug(cls, slug):
        """Look up an active storefront by its public slug"""
        return cls.query.filter_by(slug=slug, is_active=True).first()

    def __repr__(self):
        return f'<Storefront {self.slug}>'

    def to_dict(self):
        """Convert storefront to dictionary"""
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'is_active': self.is_active,
            'menu_revision': self.menu_revision,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
