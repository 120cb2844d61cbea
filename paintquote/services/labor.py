# paintquote/services/labor.py
"""
Labor cost per surface, one strategy per pricing model.
"""
import logging
from dataclasses import dataclass

from .measurements import HOUR
from .pricing_rules import PricingModel
from .tiers import lookup

logger = logging.getLogger(__name__)

# Rate-table keys tried after the surface's own name, by keyword in the name
CATEGORY_FAMILIES = (
    ('garage', ('garageDoors', 'garageDoor')),
    ('exterior wall', ('exteriorWalls',)),
    ('exterior trim', ('exteriorTrim',)),
    ('exterior door', ('exteriorDoors',)),
    ('siding', ('siding', 'exteriorWalls', 'walls')),
    ('wall', ('walls', 'wall')),
    ('ceiling', ('ceilings', 'ceiling')),
    ('baseboard', ('baseboards', 'trim')),
    ('crown', ('crownMolding', 'trim')),
    ('trim', ('trim',)),
    ('door', ('doors', 'door')),
    ('window', ('windows', 'window')),
    ('cabinet', ('cabinets', 'cabinet')),
    ('deck', ('deck', 'decks', 'decksRailings')),
    ('railing', ('decksRailings', 'railings')),
    ('fence', ('fence', 'fences')),
    ('shutter', ('shutters', 'shutter')),
    ('soffit', ('soffitFascia', 'soffit')),
    ('fascia', ('soffitFascia', 'fascia')),
    ('gutter', ('gutters', 'gutter')),
)

# Production rates in units per hour when a scheme sets none
DEFAULT_PRODUCTION_RATES = {
    'walls': 300,
    'ceilings': 250,
    'trim': 75,
    'doors': 4,
    'windows': 5,
    'cabinets': 20,
}
FALLBACK_PRODUCTION_RATE = 300

# Turnkey rate multiplier by the home's paint condition
CONDITION_MULTIPLIERS = {
    'excellent': 0.9,
    'good': 0.95,
    'average': 1.0,
    'fair': 1.1,
    'poor': 1.25,
}
DEFAULT_CONDITION = 'average'


SCOPES = ('interior', 'exterior')
UNIT_SUFFIXES = ('sqft', 'linear_ft', 'unit')


def rate_keys(category, scope=None):
    """
    Keys to try, in order, when looking `category` up in a rate table.

    The surface's own name comes first, then its keyword family. Each is also
    tried with the job scope in front ('interior_walls') and with a unit
    suffix ('walls_sqft', 'door_unit').
    """
    bases = [category]
    name = (category or '').lower()
    for needle, family_keys in CATEGORY_FAMILIES:
        if needle in name:
            bases.extend(family_keys)

    scope = (scope or '').lower()
    prefixes = [f'{scope}_', ''] if scope in SCOPES else ['']

    keys = [category]
    for base in bases:
        for prefix in prefixes:
            for key in [f'{prefix}{base}'] + [f'{prefix}{base}_{suffix}' for suffix in UNIT_SUFFIXES]:
                if key not in keys:
                    keys.append(key)
    return keys


def lookup_rate(table, category, scope=None):
    return lookup(table, rate_keys(category, scope))


@dataclass
class LaborResult:
    cost: float = 0.0
    rate: float = 0.0
    hours: float = 0.0
    crew_hours: float = 0.0
    rate_missing: bool = False


def _missing(item, table_name, rules):
    logger.warning(
        f"No {table_name} entry for '{item.category}' in {rules.model.value} scheme; "
        f"labor priced at 0"
    )
    return LaborResult(rate_missing=True)


def _rate_table_labor(item, rules, tiers):
    keys = rate_keys(item.category, item.scope)
    rate = lookup(rules.labor_rates, keys)
    rate = tiers.resolve(rate, rules.overrides('labor'), *keys)
    if rate is None:
        return _missing(item, 'laborRates', rules)
    return LaborResult(cost=item.quantity * rate, rate=rate)


def _hourly_labor(item, rules, tiers):
    keys = rate_keys(item.category, item.scope)

    if item.unit == HOUR:
        hours = item.quantity
    else:
        production_rate = lookup(rules.production_rates, keys)
        production_rate = tiers.resolve(production_rate, rules.overrides('production'), *keys)
        if production_rate is None:
            production_rate = lookup(DEFAULT_PRODUCTION_RATES, keys) or FALLBACK_PRODUCTION_RATE
        if production_rate <= 0:
            logger.warning(
                f"productionRates entry for '{item.category}' is {production_rate:g}; labor priced at 0"
            )
            return LaborResult(rate_missing=True)
        hours = item.quantity / production_rate

    billable_rate = tiers.resolve(
        rules.billable_labor_rate, rules.overrides('hourly'),
        *keys, 'billableLaborRate', 'hourlyLaborRate',
    )
    crew_hours = hours / rules.crew_size if rules.crew_size > 0 else hours
    return LaborResult(
        cost=hours * billable_rate,
        rate=billable_rate,
        hours=hours,
        crew_hours=crew_hours,
    )


def _production_labor(item, rules, tiers):
    if rules.labor_rates:
        return _rate_table_labor(item, rules, tiers)
    return _hourly_labor(item, rules, tiers)


def _unit_price_labor(item, rules, tiers):
    keys = rate_keys(item.category, item.scope)
    price = lookup(rules.unit_prices, keys)
    price = tiers.resolve(price, rules.overrides('unit'), *keys)
    if price is None:
        return _missing(item, 'unitPrices', rules)
    return LaborResult(cost=item.quantity * price, rate=price)


def _turnkey_labor(item, rules, tiers):
    # Priced once for the whole home in turnkey_price()
    return LaborResult()


LABOR_STRATEGIES = {
    PricingModel.RATE_BASED_SQFT: _rate_table_labor,
    PricingModel.PRODUCTION_BASED: _production_labor,
    PricingModel.HOURLY_TIME_MATERIALS: _hourly_labor,
    PricingModel.FLAT_RATE_UNIT: _unit_price_labor,
    PricingModel.TURNKEY: _turnkey_labor,
}


def labor_cost(item, rules, tiers):
    """Labor for one selected surface under the scheme's pricing model."""
    result = LABOR_STRATEGIES[rules.model](item, rules, tiers)
    logger.debug(
        f"Labor {item.category}: {item.quantity} {item.unit} @ {result.rate} = {result.cost}"
    )
    return result


def condition_multiplier(condition):
    key = str(condition or DEFAULT_CONDITION).strip().lower()
    if key not in CONDITION_MULTIPLIERS:
        logger.warning(f"Unknown property condition '{condition}'; using {DEFAULT_CONDITION}")
        key = DEFAULT_CONDITION
    return CONDITION_MULTIPLIERS[key]


def turnkey_price(home_sqft, job_scope, rules, tiers, condition=None):
    """
    Whole-home price for turnkey schemes.

    Returns (total, rate). The scope-specific rate replaces the generic one
    when the scheme has it, and the tier override beats both. The property
    condition then scales whichever rate won.
    """
    scope = (job_scope or '').lower()
    rate = rules.turnkey_rate
    rate_key = 'turnkeyRate'

    if scope == 'interior' and rules.interior_rate is not None:
        rate, rate_key = rules.interior_rate, 'interiorRate'
    elif scope == 'exterior' and rules.exterior_rate is not None:
        rate, rate_key = rules.exterior_rate, 'exteriorRate'

    rate = tiers.resolve(rate, rules.overrides('turnkey'), rate_key, 'turnkeyRate')
    rate = rate * condition_multiplier(condition)
    return home_sqft * rate, rate
