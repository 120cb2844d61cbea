# paintquote/services/pricing_rules.py
"""
Parsing and validation of a pricing scheme's rules document.

The document is the JSON stored on PricingScheme.pricing_rules. Every value is
optional; missing values fall back to the configured pricing defaults.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum

from .measurements import to_bool, to_float

logger = logging.getLogger(__name__)


class PricingConfigurationError(ValueError):
    """Raised for a pricing scheme document the engine cannot price with."""


class PricingModel(str, Enum):
    TURNKEY = 'turnkey'
    RATE_BASED_SQFT = 'rate_based_sqft'
    PRODUCTION_BASED = 'production_based'
    FLAT_RATE_UNIT = 'flat_rate_unit'
    HOURLY_TIME_MATERIALS = 'hourly_time_materials'


LEGACY_MODEL_ALIASES = {
    'sqft_turnkey': PricingModel.TURNKEY,
    'sqft_labor_paint': PricingModel.RATE_BASED_SQFT,
    'sqft_labor_only': PricingModel.RATE_BASED_SQFT,
    'unit_pricing': PricingModel.FLAT_RATE_UNIT,
    'room_flat_rate': PricingModel.FLAT_RATE_UNIT,
    'unit_based': PricingModel.FLAT_RATE_UNIT,
}

# Models whose price already includes paint
ALL_IN_MODELS = (PricingModel.TURNKEY, PricingModel.FLAT_RATE_UNIT)

PRICING_DEFAULTS = {
    'coverage': 350.0,
    'cost_per_gallon': 40.0,
    'coats': 2,
    'billable_labor_rate': 50.0,
    'crew_size': 2,
    'deposit_percent': 50.0,
    'turnkey_rate': 3.50,
}

# Tier override tables, by the name they carry in the rules document
TIER_TABLES = {
    'labor': 'gbbRates',
    'hourly': 'gbbHourlyRates',
    'unit': 'gbbUnitPrices',
    'production': 'gbbProductionRates',
    'turnkey': 'gbbTurnkeyRates',
    'material': 'gbbMaterialSettings',
}

RATE_TABLE_KEYS = ('laborRates', 'unitPrices', 'productionRates')
PERCENT_KEYS = (
    'laborMarkupPercent',
    'materialMarkupPercent',
    'overheadPercent',
    'profitMarginPercent',
    'taxPercent',
    'taxRatePercentage',
    'depositPercent',
)
SCALAR_RATE_KEYS = (
    'costPerGallon',
    'billableLaborRate',
    'hourlyLaborRate',
    'turnkeyRate',
    'interiorRate',
    'exteriorRate',
)

MIN_COVERAGE = 100
MAX_COVERAGE = 500
MIN_COATS = 1
MAX_COATS = 5


def normalize_model(model_type):
    """Resolve a scheme type, including legacy names, to a PricingModel."""
    if isinstance(model_type, PricingModel):
        return model_type

    key = str(model_type or '').strip().lower()
    if key in LEGACY_MODEL_ALIASES:
        return LEGACY_MODEL_ALIASES[key]
    try:
        return PricingModel(key)
    except ValueError:
        raise PricingConfigurationError(f"Unknown pricing scheme type: '{model_type}'")


def defaults_from_config(app_config):
    """Pricing defaults taken from a Flask config mapping."""
    return {
        'coverage': app_config.get('DEFAULT_COVERAGE', PRICING_DEFAULTS['coverage']),
        'cost_per_gallon': app_config.get('DEFAULT_COST_PER_GALLON', PRICING_DEFAULTS['cost_per_gallon']),
        'coats': app_config.get('DEFAULT_COATS', PRICING_DEFAULTS['coats']),
        'billable_labor_rate': app_config.get('DEFAULT_BILLABLE_LABOR_RATE', PRICING_DEFAULTS['billable_labor_rate']),
        'crew_size': app_config.get('DEFAULT_CREW_SIZE', PRICING_DEFAULTS['crew_size']),
        'deposit_percent': app_config.get('DEFAULT_DEPOSIT_PERCENT', PRICING_DEFAULTS['deposit_percent']),
        'turnkey_rate': PRICING_DEFAULTS['turnkey_rate'],
    }


def _rate_table(value, name):
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise PricingConfigurationError(f"'{name}' must be an object of rates")
    return dict(value)


def _optional_float(data, *keys):
    for key in keys:
        if data.get(key) not in (None, ''):
            return to_float(data.get(key))
    return None


@dataclass
class PricingRules:
    """A pricing scheme's rules with defaults applied."""
    model: PricingModel
    coverage: float = PRICING_DEFAULTS['coverage']
    cost_per_gallon: float = PRICING_DEFAULTS['cost_per_gallon']
    coats: float = PRICING_DEFAULTS['coats']
    application_method: str = 'roll'
    include_materials: bool = True
    allow_manual_gallons: bool = False

    labor_rates: dict = field(default_factory=dict)
    unit_prices: dict = field(default_factory=dict)
    production_rates: dict = field(default_factory=dict)
    billable_labor_rate: float = PRICING_DEFAULTS['billable_labor_rate']
    crew_size: float = PRICING_DEFAULTS['crew_size']

    turnkey_rate: float = PRICING_DEFAULTS['turnkey_rate']
    interior_rate: float = None
    exterior_rate: float = None

    tiering_enabled: bool = False
    tier_overrides: dict = field(default_factory=dict)

    labor_markup_percent: float = 0.0
    material_markup_percent: float = 0.0
    overhead_percent: float = 0.0
    profit_margin_percent: float = 0.0
    tax_percent: float = 0.0
    deposit_percent: float = PRICING_DEFAULTS['deposit_percent']

    @classmethod
    def from_dict(cls, model_type, data=None, defaults=None):
        model = normalize_model(model_type)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise PricingConfigurationError("Pricing rules must be a JSON object")

        base = dict(PRICING_DEFAULTS)
        base.update(defaults or {})

        tier_overrides = {}
        for kind, table_name in TIER_TABLES.items():
            table = data.get(table_name)
            if table is None:
                continue
            if not isinstance(table, dict):
                raise PricingConfigurationError(f"'{table_name}' must be an object keyed by tier")
            tier_overrides[kind] = table

        include_materials = data.get('includeMaterials')
        if include_materials is None:
            # Labor-only legacy schemes never carried paint
            include_materials = str(model_type).lower() != 'sqft_labor_only'

        tax_percent = _optional_float(data, 'taxPercent', 'taxRatePercentage')
        deposit_percent = _optional_float(data, 'depositPercent')

        return cls(
            model=model,
            coverage=to_float(data.get('coverage'), base['coverage']) or base['coverage'],
            cost_per_gallon=to_float(data.get('costPerGallon'), base['cost_per_gallon']),
            coats=to_float(data.get('coats'), base['coats']) or base['coats'],
            application_method=str(data.get('applicationMethod') or 'roll').lower(),
            include_materials=to_bool(include_materials, True),
            allow_manual_gallons=to_bool(data.get('allowManualGallons')),
            labor_rates=_rate_table(data.get('laborRates'), 'laborRates'),
            unit_prices=_rate_table(data.get('unitPrices'), 'unitPrices'),
            production_rates=_rate_table(data.get('productionRates'), 'productionRates'),
            billable_labor_rate=to_float(
                data.get('billableLaborRate', data.get('hourlyLaborRate')),
                base['billable_labor_rate'],
            ),
            crew_size=to_float(data.get('crewSize'), base['crew_size']) or base['crew_size'],
            turnkey_rate=to_float(data.get('turnkeyRate'), base['turnkey_rate']),
            interior_rate=_optional_float(data, 'interiorRate'),
            exterior_rate=_optional_float(data, 'exteriorRate'),
            tiering_enabled=to_bool(data.get('gbbEnabled', data.get('tieringEnabled'))),
            tier_overrides=tier_overrides,
            labor_markup_percent=to_float(data.get('laborMarkupPercent')),
            material_markup_percent=to_float(data.get('materialMarkupPercent')),
            overhead_percent=to_float(data.get('overheadPercent')),
            profit_margin_percent=to_float(data.get('profitMarginPercent')),
            tax_percent=tax_percent if tax_percent is not None else 0.0,
            deposit_percent=deposit_percent if deposit_percent is not None else base['deposit_percent'],
        )

    @property
    def is_all_in(self):
        return self.model in ALL_IN_MODELS

    def overrides(self, kind):
        return self.tier_overrides.get(kind, {})


def _issue(code, field_name, message, value=None):
    return {'code': code, 'field': field_name, 'message': message, 'value': value}


def validate_pricing_rules(data):
    """
    Check a rules document for values a contractor would want to fix.

    Returns a list of issue dicts; an empty list means the document is usable.
    """
    issues = []
    if not isinstance(data, dict):
        return [_issue('invalid_document', None, 'Pricing rules must be a JSON object')]

    if data.get('coverage') not in (None, ''):
        coverage = to_float(data.get('coverage'), None)
        if coverage is None or not MIN_COVERAGE <= coverage <= MAX_COVERAGE:
            issues.append(_issue(
                'coverage_out_of_range', 'coverage',
                f'Coverage must be between {MIN_COVERAGE} and {MAX_COVERAGE} sq ft per gallon',
                data.get('coverage'),
            ))

    if data.get('coats') not in (None, ''):
        coats = to_float(data.get('coats'), None)
        if coats is None or not MIN_COATS <= coats <= MAX_COATS:
            issues.append(_issue(
                'coats_out_of_range', 'coats',
                f'Coats must be between {MIN_COATS} and {MAX_COATS}',
                data.get('coats'),
            ))

    for key in SCALAR_RATE_KEYS:
        if data.get(key) not in (None, '') and to_float(data.get(key), -1) < 0:
            issues.append(_issue('negative_rate', key, f'{key} cannot be negative', data.get(key)))

    for table_name in RATE_TABLE_KEYS:
        table = data.get(table_name) or {}
        if not isinstance(table, dict):
            issues.append(_issue('invalid_table', table_name, f'{table_name} must be an object'))
            continue
        for category, rate in table.items():
            if to_float(rate, -1) < 0:
                issues.append(_issue(
                    'negative_rate', f'{table_name}.{category}',
                    f'Rate for {category} cannot be negative', rate,
                ))

    for table_name in TIER_TABLES.values():
        tiers = data.get(table_name) or {}
        if not isinstance(tiers, dict):
            issues.append(_issue('invalid_table', table_name, f'{table_name} must be an object keyed by tier'))
            continue
        for tier, table in tiers.items():
            if not isinstance(table, dict):
                continue
            for key, rate in table.items():
                if isinstance(rate, (int, float, str)) and to_float(rate, -1) < 0:
                    issues.append(_issue(
                        'negative_rate', f'{table_name}.{tier}.{key}',
                        f'{tier.title()} tier rate for {key} cannot be negative', rate,
                    ))

    for key in PERCENT_KEYS:
        if data.get(key) in (None, ''):
            continue
        percent = to_float(data.get(key), None)
        if percent is None or not 0 <= percent <= 100:
            issues.append(_issue(
                'percent_out_of_range', key, f'{key} must be between 0 and 100', data.get(key),
            ))

    if issues:
        logger.debug(f"Pricing rules validation found {len(issues)} issue(s)")
    return issues


MODEL_LABELS = {
    PricingModel.TURNKEY: 'Turnkey',
    PricingModel.RATE_BASED_SQFT: 'Rate-based',
    PricingModel.PRODUCTION_BASED: 'Production-based',
    PricingModel.FLAT_RATE_UNIT: 'Flat rate per unit',
    PricingModel.HOURLY_TIME_MATERIALS: 'Time & materials',
}


def summarize_rules(model_type, data):
    """One-line human readable description of a scheme's rules."""
    rules = PricingRules.from_dict(model_type, data)
    parts = [MODEL_LABELS[rules.model]]

    if rules.model == PricingModel.TURNKEY:
        parts.append(f'${rules.turnkey_rate:.2f}/sq ft of home')
    elif rules.model == PricingModel.FLAT_RATE_UNIT:
        parts.append(f'{len(rules.unit_prices)} unit prices')
    elif rules.model == PricingModel.HOURLY_TIME_MATERIALS or not rules.labor_rates:
        parts.append(f'${rules.billable_labor_rate:.2f}/hr, crew of {rules.crew_size:g}')
    else:
        parts.append(f'{len(rules.labor_rates)} labor rates')

    if rules.include_materials:
        parts.append(f'{rules.coverage:g} sq ft/gal at ${rules.cost_per_gallon:.2f}/gal, {rules.coats:g} coats')
    else:
        parts.append('labor only')

    if rules.tiering_enabled:
        parts.append('good/better/best tiers')
    if rules.overhead_percent or rules.profit_margin_percent:
        parts.append(f'{rules.overhead_percent:g}% overhead, {rules.profit_margin_percent:g}% profit')

    return ' · '.join(parts)
