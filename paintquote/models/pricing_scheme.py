# paintquote/models/pricing_scheme.py

from datetime import datetime
from .base import db


class PricingScheme(db.Model):
    __tablename__ = 'pricing_schemes'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    # turnkey, rate_based_sqft, production_based, flat_rate_unit, hourly_time_materials
    type = db.Column(db.String(40), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    is_default = db.Column(db.Boolean, default=False, index=True)
    is_active = db.Column(db.Boolean, default=True)

    # coverage, costPerGallon, rate tables, gbb* tier overrides, percentages
    pricing_rules = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    quotes = db.relationship('Quote', backref='pricing_scheme', lazy='dynamic')

    def to_dict(self):
        """Serializes the scheme in the shape the pricing engine consumes."""
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'description': self.description,
            'isDefault': bool(self.is_default),
            'isActive': bool(self.is_active),
            'pricingRules': self.pricing_rules or {},
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<PricingScheme id={self.id} name={self.name} type={self.type}>'
