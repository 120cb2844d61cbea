# paintquote/models/tenant.py

from datetime import datetime
from .base import db


class Tenant(db.Model):
    __tablename__ = 'tenants'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    users = db.relationship('User', backref='tenant', lazy='dynamic', cascade="all, delete-orphan")
    pricing_schemes = db.relationship('PricingScheme', backref='tenant', lazy='dynamic', cascade="all, delete-orphan")
    quotes = db.relationship('Quote', backref='tenant', lazy='dynamic', cascade="all, delete-orphan")

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
