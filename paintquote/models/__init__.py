# paintquote/models/__init__.py

from .base import db

# Import order matters: foreign keys point at tenants and pricing_schemes.
from .tenant import Tenant
from .user import User
from .pricing_scheme import PricingScheme
from .quote import Quote, QUOTE_STATUSES

__all__ = [
    'db',
    'Tenant',
    'User',
    'PricingScheme',
    'Quote',
    'QUOTE_STATUSES',
]
