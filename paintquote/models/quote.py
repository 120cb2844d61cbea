# paintquote/models/quote.py

from datetime import datetime
from .base import db

QUOTE_STATUSES = ('draft', 'sent', 'viewed', 'accepted', 'scheduled', 'declined', 'archived')


class Quote(db.Model):
    __tablename__ = 'quotes'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('tenants.id'), nullable=False, index=True)
    quote_number = db.Column(db.String(20), unique=True)

    # Customer and job
    customer_name = db.Column(db.String(200), nullable=True)
    customer_email = db.Column(db.String(120), nullable=True)
    customer_phone = db.Column(db.String(30), nullable=True)
    job_address = db.Column(db.String(255), nullable=True)
    job_type = db.Column(db.String(20), default='interior')  # 'interior', 'exterior', 'both'
    notes = db.Column(db.Text, nullable=True)

    # Pricing inputs
    pricing_scheme_id = db.Column(db.Integer, db.ForeignKey('pricing_schemes.id'), nullable=True)
    selected_tier = db.Column(db.String(10), nullable=True)
    home_sqft = db.Column(db.Float, nullable=True)
    condition_modifier = db.Column(db.String(20), default='average')  # 'excellent' .. 'poor'
    areas = db.Column(db.JSON, nullable=True)
    product_sets = db.Column(db.JSON, nullable=True)

    # Computed totals (refreshed by the quote calculator)
    labor_total = db.Column(db.Float, default=0.0)
    material_total = db.Column(db.Float, default=0.0)
    material_markup_amount = db.Column(db.Float, default=0.0)
    overhead = db.Column(db.Float, default=0.0)
    profit_amount = db.Column(db.Float, default=0.0)
    subtotal = db.Column(db.Float, default=0.0)
    tax = db.Column(db.Float, default=0.0)
    total = db.Column(db.Float, default=0.0)
    deposit = db.Column(db.Float, default=0.0)
    balance = db.Column(db.Float, default=0.0)
    breakdown = db.Column(db.JSON, nullable=True)
    calculated_at = db.Column(db.DateTime, nullable=True)

    status = db.Column(db.String(20), default='draft', nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    sent_at = db.Column(db.DateTime, nullable=True)

    def apply_breakdown(self, breakdown):
        """Copy a presentation-rounded breakdown dict onto the total columns."""
        self.labor_total = breakdown['laborTotal']
        self.material_total = breakdown['materialTotal']
        self.material_markup_amount = breakdown['materialMarkupAmount']
        self.overhead = breakdown['overhead']
        self.profit_amount = breakdown['profitAmount']
        self.subtotal = breakdown['subtotal']
        self.tax = breakdown['tax']
        self.total = breakdown['total']
        self.deposit = breakdown['deposit']
        self.balance = breakdown['balance']
        self.breakdown = breakdown
        self.calculated_at = datetime.utcnow()

    def calculation_input(self):
        """The builder state in the wire shape the quote calculator reads."""
        return {
            'jobType': self.job_type,
            'homeSqft': self.home_sqft,
            'conditionModifier': self.condition_modifier,
            'areas': self.areas or [],
            'productSets': self.product_sets or {},
        }

    def to_dict(self):
        return {
            'id': self.id,
            'quote_number': self.quote_number,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'job_address': self.job_address,
            'job_type': self.job_type,
            'notes': self.notes,
            'pricing_scheme_id': self.pricing_scheme_id,
            'pricing_scheme_name': self.pricing_scheme.name if self.pricing_scheme else None,
            'selected_tier': self.selected_tier,
            'home_sqft': self.home_sqft,
            'condition_modifier': self.condition_modifier,
            'areas': self.areas or [],
            'product_sets': self.product_sets or {},
            'totals': {
                'laborTotal': self.labor_total,
                'materialTotal': self.material_total,
                'materialMarkupAmount': self.material_markup_amount,
                'overhead': self.overhead,
                'profitAmount': self.profit_amount,
                'subtotal': self.subtotal,
                'tax': self.tax,
                'total': self.total,
                'deposit': self.deposit,
                'balance': self.balance,
            },
            'breakdown': self.breakdown,
            'calculated_at': self.calculated_at.isoformat() if self.calculated_at else None,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'sent_at': self.sent_at.isoformat() if self.sent_at else None,
        }

    def __repr__(self):
        return f'<Quote id={self.id} number={self.quote_number} status={self.status}>'
