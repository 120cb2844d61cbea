# paintquote/services/quote_service.py

import logging
from flask import current_app
from flask_login import current_user

from paintquote.models import PricingScheme
from .events import CalculationCompleted, get_event_bus
from .pricing_rules import defaults_from_config
from .quote_calculator import calculate_quote, calculate_tier_options

logger = logging.getLogger(__name__)


def pricing_defaults():
    return defaults_from_config(current_app.config)


def find_scheme(scheme_id=None):
    """Active scheme of the current tenant by id, else the tenant's default (or first active) scheme."""
    query = PricingScheme.query.filter_by(tenant_id=current_user.tenant_id, is_active=True)
    if scheme_id is not None:
        return query.filter_by(id=scheme_id).first()

    scheme = query.filter_by(is_default=True).first()
    if scheme is None:
        scheme = query.order_by(PricingScheme.id).first()
    return scheme


def _publish(calculation, quote_id=None):
    breakdown = calculation.breakdown
    get_event_bus().publish(CalculationCompleted(
        model=calculation.model.value,
        tier=calculation.tier,
        total=round(breakdown.total, 2) if breakdown else None,
        ok=calculation.ok,
        quote_id=quote_id,
        tenant_id=current_user.tenant_id if current_user.is_authenticated else None,
    ))


def run_calculation(quote_input, scheme, tier=None, quote_id=None):
    """Price `quote_input` with a scheme row using the app's pricing defaults."""
    calculation = calculate_quote(quote_input, scheme.to_dict(), tier=tier, defaults=pricing_defaults())
    _publish(calculation, quote_id)
    return calculation


def run_tier_options(quote_input, scheme, quote_id=None):
    options = calculate_tier_options(quote_input, scheme.to_dict(), defaults=pricing_defaults())
    for calculation in options.values():
        _publish(calculation, quote_id)
    return options


def calculation_response(calculation, scheme):
    """JSON body and status code for a calculation result."""
    if not calculation.ok:
        return {
            'success': False,
            'errors': calculation.errors_to_list(),
            'message': 'The quote is missing information needed to price it.',
        }, 422

    return {
        'success': True,
        'pricingScheme': {'id': scheme.id, 'name': scheme.name, 'type': scheme.type},
        'breakdown': calculation.to_dict(),
    }, 200
