# paintquote/services/quote_calculator.py
"""
Quote aggregation: the one place quote totals are computed.

calculate_quote() validates the builder state, prices every selected surface
with the labor and material calculators, and folds the results into a
CostBreakdown. Validation problems come back as data on the result; they are
user-correctable and never raised.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .labor import labor_cost, turnkey_price
from .materials import (
    MaterialResult,
    apply_markup,
    cost_per_gallon_for,
    split_all_in_price,
    surface_material,
)
from .measurements import SQFT, Area, to_float
from .pricing_rules import PricingModel, PricingRules
from .tiers import TIERS, TierSelector

logger = logging.getLogger(__name__)


def _money(value):
    return round(value, 2)


@dataclass
class ValidationIssue:
    code: str
    message: str
    area: Optional[str] = None
    surface: Optional[str] = None

    def to_dict(self):
        return {
            'code': self.code,
            'message': self.message,
            'area': self.area,
            'surface': self.surface,
        }


@dataclass
class CostBreakdown:
    labor_total: float
    labor_markup_percent: float
    labor_markup_amount: float
    labor_total_with_markup: float
    material_cost: float
    material_markup_percent: float
    material_markup_amount: float
    material_total: float
    subtotal_before_overhead: float
    overhead_percent: float
    overhead: float
    subtotal_before_profit: float
    profit_margin_percent: float
    profit_amount: float
    subtotal: float
    tax_percent: float
    tax: float
    total: float
    deposit_percent: float
    deposit: float
    balance: float

    def to_dict(self):
        return {
            'laborTotal': _money(self.labor_total),
            'laborMarkupPercent': self.labor_markup_percent,
            'laborMarkupAmount': _money(self.labor_markup_amount),
            'laborCostWithMarkup': _money(self.labor_total_with_markup),
            'materialCost': _money(self.material_cost),
            'materialMarkupPercent': self.material_markup_percent,
            'materialMarkupAmount': _money(self.material_markup_amount),
            'materialTotal': _money(self.material_total),
            'subtotalBeforeOverhead': _money(self.subtotal_before_overhead),
            'overheadPercent': self.overhead_percent,
            'overhead': _money(self.overhead),
            'subtotalBeforeProfit': _money(self.subtotal_before_profit),
            'profitMarginPercent': self.profit_margin_percent,
            'profitAmount': _money(self.profit_amount),
            'subtotal': _money(self.subtotal),
            'taxPercent': self.tax_percent,
            'tax': _money(self.tax),
            'total': _money(self.total),
            'depositPercent': self.deposit_percent,
            'deposit': _money(self.deposit),
            'balance': _money(self.balance),
        }


def aggregate_totals(labor_total, material_cost, *, labor_markup_percent=0.0,
                     material_markup_percent=0.0, overhead_percent=0.0, profit_margin_percent=0.0,
                     tax_percent=0.0, deposit_percent=0.0):
    """
    Fold labor and raw material cost into the full breakdown.

    Each step feeds the next in this exact order and nothing is rounded
    along the way; CostBreakdown.to_dict() rounds for display.
    """
    labor_markup_amount, labor_total_with_markup = apply_markup(labor_total, labor_markup_percent)
    material_markup_amount, material_total = apply_markup(material_cost, material_markup_percent)

    subtotal_before_overhead = labor_total_with_markup + material_total
    overhead = subtotal_before_overhead * overhead_percent / 100
    subtotal_before_profit = subtotal_before_overhead + overhead
    profit_amount = subtotal_before_profit * profit_margin_percent / 100
    subtotal = subtotal_before_profit + profit_amount
    tax = subtotal * tax_percent / 100
    total = subtotal + tax
    deposit = total * deposit_percent / 100
    balance = total - deposit

    return CostBreakdown(
        labor_total=labor_total,
        labor_markup_percent=labor_markup_percent,
        labor_markup_amount=labor_markup_amount,
        labor_total_with_markup=labor_total_with_markup,
        material_cost=material_cost,
        material_markup_percent=material_markup_percent,
        material_markup_amount=material_markup_amount,
        material_total=material_total,
        subtotal_before_overhead=subtotal_before_overhead,
        overhead_percent=overhead_percent,
        overhead=overhead,
        subtotal_before_profit=subtotal_before_profit,
        profit_margin_percent=profit_margin_percent,
        profit_amount=profit_amount,
        subtotal=subtotal,
        tax_percent=tax_percent,
        tax=tax,
        total=total,
        deposit_percent=deposit_percent,
        deposit=deposit,
        balance=balance,
    )


@dataclass
class SurfaceLine:
    area: str
    category: str
    unit: str
    quantity: float
    coats: float = 0.0
    labor_rate: float = 0.0
    labor_cost: float = 0.0
    hours: float = 0.0
    gallons: float = 0.0
    cost_per_gallon: float = 0.0
    material_cost: float = 0.0
    manual_gallons: bool = False
    rate_missing: bool = False

    def to_dict(self):
        return {
            'area': self.area,
            'category': self.category,
            'unit': self.unit,
            'quantity': round(self.quantity, 2),
            'coats': self.coats,
            'laborRate': self.labor_rate,
            'laborCost': _money(self.labor_cost),
            'hours': round(self.hours, 2),
            'gallons': self.gallons,
            'costPerGallon': self.cost_per_gallon,
            'materialCost': _money(self.material_cost),
            'manualGallons': self.manual_gallons,
            'rateMissing': self.rate_missing,
        }


@dataclass
class QuoteCalculation:
    model: PricingModel
    tier: Optional[str] = None
    breakdown: Optional[CostBreakdown] = None
    line_items: List[SurfaceLine] = field(default_factory=list)
    errors: List[ValidationIssue] = field(default_factory=list)
    total_sqft: float = 0.0
    gallons: float = 0.0
    total_hours: float = 0.0
    crew_hours: float = 0.0
    missing_rates: List[str] = field(default_factory=list)

    @property
    def ok(self):
        return not self.errors and self.breakdown is not None

    def to_dict(self):
        data = self.breakdown.to_dict() if self.breakdown else {}
        data.update({
            'model': self.model.value,
            'tier': self.tier,
            'totalSqft': round(self.total_sqft, 2),
            'gallons': self.gallons,
            'totalHours': round(self.total_hours, 2),
            'crewHours': round(self.crew_hours, 2),
            'missingRates': list(self.missing_rates),
            'lineItems': [line.to_dict() for line in self.line_items],
        })
        return data

    def errors_to_list(self):
        return [issue.to_dict() for issue in self.errors]


def _as_areas(areas, job_type=None):
    return [
        area if isinstance(area, Area) else Area.from_dict(area, position, job_type)
        for position, area in enumerate(areas or [])
        if isinstance(area, (Area, dict))
    ]


def validate_areas(areas):
    """Problems that stop a quote from being priced, each naming its area/surface."""
    areas = _as_areas(areas)
    if not areas:
        return [ValidationIssue('no_areas', 'Add at least one area to the quote')]

    issues = []
    for area in areas:
        priced = 0
        for surface in area.selected_surfaces:
            if surface.quantity > 0:
                priced += 1
                continue
            missing = surface.missing_measurements() if surface.dimensions is not None else []
            if missing:
                issues.append(ValidationIssue(
                    'missing_measurement',
                    f"{area.name}: {surface.category} is missing {', '.join(missing)}",
                    area=area.name,
                    surface=surface.category,
                ))

        if not priced:
            issues.append(ValidationIssue(
                'no_selected_surfaces',
                f"{area.name} has no selected surfaces with a measured quantity",
                area=area.name,
            ))
    return issues


def _scheme_parts(scheme_input):
    if hasattr(scheme_input, 'pricing_rules'):
        return scheme_input.type, scheme_input.pricing_rules
    return scheme_input.get('type'), scheme_input.get('pricingRules', scheme_input.get('pricing_rules'))


def _finish(calculation, rules, labor_total, material_cost):
    calculation.breakdown = aggregate_totals(
        labor_total,
        material_cost,
        labor_markup_percent=rules.labor_markup_percent,
        material_markup_percent=rules.material_markup_percent,
        overhead_percent=rules.overhead_percent,
        profit_margin_percent=rules.profit_margin_percent,
        tax_percent=rules.tax_percent,
        deposit_percent=rules.deposit_percent,
    )
    logger.debug(
        f"Quote priced with {rules.model.value} (tier={calculation.tier}): "
        f"total={calculation.breakdown.total}"
    )
    return calculation


def _calculate_turnkey(quote_input, rules, tiers, calculation):
    home_sqft = to_float(quote_input.get('homeSqft'))
    if home_sqft <= 0:
        calculation.errors.append(ValidationIssue(
            'missing_home_sqft', 'Enter the home square footage for turnkey pricing',
        ))
        return calculation

    price, rate = turnkey_price(
        home_sqft, quote_input.get('jobType'), rules, tiers, quote_input.get('conditionModifier'),
    )
    labor_total, material_cost = split_all_in_price(price, rules.include_materials)

    calculation.total_sqft = home_sqft
    calculation.line_items.append(SurfaceLine(
        area='Whole home',
        category='Turnkey',
        unit=SQFT,
        quantity=home_sqft,
        labor_rate=rate,
        labor_cost=labor_total,
        material_cost=material_cost,
    ))
    return _finish(calculation, rules, labor_total, material_cost)


def calculate_quote(quote_input, scheme_input, tier=None, defaults=None):
    """
    Price a quote's builder state with a pricing scheme.

    `quote_input` is the wire shape {jobType, homeSqft, conditionModifier, areas,
    productSets}; `scheme_input` is {type, pricingRules} or a PricingScheme row.
    """
    model_type, rules_data = _scheme_parts(scheme_input)
    rules = PricingRules.from_dict(model_type, rules_data, defaults)
    tiers = TierSelector(rules.tiering_enabled, tier)
    calculation = QuoteCalculation(model=rules.model, tier=tiers.tier.value if tiers.tier else None)

    if rules.model == PricingModel.TURNKEY:
        return _calculate_turnkey(quote_input, rules, tiers, calculation)

    areas = _as_areas(quote_input.get('areas'), quote_input.get('jobType'))
    calculation.errors = validate_areas(areas)
    if calculation.errors:
        logger.info(f"Quote calculation refused: {len(calculation.errors)} validation issue(s)")
        return calculation

    product_sets = quote_input.get('productSets')
    labor_total = 0.0
    material_cost = 0.0

    for area in areas:
        for surface in area.selected_surfaces:
            if surface.quantity <= 0:
                continue

            labor = labor_cost(surface, rules, tiers)
            if rules.is_all_in or not rules.include_materials:
                material = MaterialResult()
            else:
                material = surface_material(
                    surface, rules, cost_per_gallon_for(surface.category, rules, product_sets, tiers),
                )

            labor_total += labor.cost
            material_cost += material.raw_cost
            calculation.gallons += material.gallons
            calculation.total_hours += labor.hours
            calculation.crew_hours += labor.crew_hours
            if surface.unit == SQFT:
                calculation.total_sqft += surface.quantity
            if labor.rate_missing and surface.category not in calculation.missing_rates:
                calculation.missing_rates.append(surface.category)

            calculation.line_items.append(SurfaceLine(
                area=area.name,
                category=surface.category,
                unit=surface.unit,
                quantity=surface.quantity,
                coats=surface.coats or rules.coats,
                labor_rate=labor.rate,
                labor_cost=labor.cost,
                hours=labor.hours,
                gallons=material.gallons,
                cost_per_gallon=material.cost_per_gallon,
                material_cost=material.raw_cost,
                manual_gallons=material.manual,
                rate_missing=labor.rate_missing,
            ))

    if rules.is_all_in:
        labor_total, material_cost = split_all_in_price(labor_total, rules.include_materials)

    return _finish(calculation, rules, labor_total, material_cost)


def calculate_tier_options(quote_input, scheme_input, defaults=None):
    """Good, better and best calculations side by side, keyed by tier name."""
    return {
        tier.value: calculate_quote(quote_input, scheme_input, tier=tier, defaults=defaults)
        for tier in TIERS
    }
