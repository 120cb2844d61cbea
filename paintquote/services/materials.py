# paintquote/services/materials.py
"""
Paint quantities and material cost.
"""
import logging
import math
from dataclasses import dataclass

from .measurements import SQFT, to_float
from .pricing_rules import PRICING_DEFAULTS
from .tiers import normalize_key

logger = logging.getLogger(__name__)

DEFAULT_COVERAGE = PRICING_DEFAULTS['coverage']
SPRAY_COVERAGE = 300.0

# Display split of an all-in price
ALL_IN_LABOR_SHARE = 0.60
ALL_IN_MATERIAL_SHARE = 0.40


def round_up_to_half_gallon(gallons):
    gallons = to_float(gallons)
    if gallons <= 0:
        return 0.0
    return math.ceil(gallons * 2) / 2


def effective_coverage(coverage, application_method='roll'):
    """Spraying loses paint to overspray, so the stock coverage drops to 300 sq ft/gal."""
    coverage = to_float(coverage) or DEFAULT_COVERAGE
    if (application_method or '').lower() == 'spray' and coverage == DEFAULT_COVERAGE:
        return SPRAY_COVERAGE
    return coverage


def gallons_required(quantity, coats, coverage):
    if coverage <= 0 or quantity <= 0 or coats <= 0:
        return 0.0
    return round_up_to_half_gallon(quantity * coats / coverage)


@dataclass
class MaterialResult:
    gallons: float = 0.0
    cost_per_gallon: float = 0.0
    raw_cost: float = 0.0
    manual: bool = False


def surface_material(item, rules, cost_per_gallon):
    """Gallons and raw paint cost for one surface; only square-foot surfaces take paint."""
    if item.unit != SQFT:
        return MaterialResult(cost_per_gallon=cost_per_gallon)

    if (item.allow_manual_gallons or rules.allow_manual_gallons) and item.gallons is not None:
        gallons = max(item.gallons, 0.0)
        manual = True
    else:
        coats = item.coats if item.coats else rules.coats
        coverage = effective_coverage(rules.coverage, rules.application_method)
        gallons = gallons_required(item.quantity, coats, coverage)
        manual = False

    return MaterialResult(
        gallons=gallons,
        cost_per_gallon=cost_per_gallon,
        raw_cost=gallons * cost_per_gallon,
        manual=manual,
    )


def apply_markup(raw_cost, markup_percent):
    """Returns (markup_amount, cost_with_markup)."""
    markup_amount = raw_cost * (markup_percent / 100)
    return markup_amount, raw_cost + markup_amount


def split_all_in_price(total, include_materials):
    """Returns (labor, material) shares of an all-in price."""
    if not include_materials:
        return total, 0.0
    return total * ALL_IN_LABOR_SHARE, total * ALL_IN_MATERIAL_SHARE


def find_product_set(product_sets, category):
    """
    The quote's product choice for a surface.

    Product sets arrive either keyed by surface type or as a list of entries
    carrying a `surfaceType`.
    """
    if not product_sets:
        return None

    wanted = normalize_key(category)
    if isinstance(product_sets, dict):
        for surface_type, entry in product_sets.items():
            if normalize_key(surface_type) == wanted and isinstance(entry, dict):
                return entry
        return None

    for entry in product_sets:
        if isinstance(entry, dict) and normalize_key(entry.get('surfaceType', '')) == wanted:
            return entry
    return None


def _product_price(product):
    if not isinstance(product, dict):
        return None
    for key in ('pricePerGallon', 'costPerGallon', 'price'):
        price = to_float(product.get(key), None)
        if price is not None and product.get(key) not in (None, ''):
            return price
    return None


def product_price_for(product_set, tier):
    if not product_set:
        return None

    products = product_set.get('products') if isinstance(product_set.get('products'), dict) else product_set
    if tier is not None:
        price = _product_price(products.get(tier.value))
        if price is not None:
            return price
    return _product_price(product_set)


def cost_per_gallon_for(category, rules, product_sets, tiers):
    """Selected product price, then the tier's material override, then the scheme's base price."""
    # Tier-keyed products only count when the scheme prices in tiers
    tier = tiers.tier if tiers.active else None
    price = product_price_for(find_product_set(product_sets, category), tier)
    if price is not None:
        return price
    return tiers.resolve(rules.cost_per_gallon, rules.overrides('material'), 'costPerGallon')
