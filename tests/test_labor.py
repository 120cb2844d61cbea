# tests/test_labor.py
import pytest

from paintquote.services.labor import labor_cost, lookup_rate, rate_keys, turnkey_price
from paintquote.services.measurements import HOUR, LINEAR_FOOT, UNIT_COUNT, SurfaceItem
from paintquote.services.pricing_rules import PricingRules
from paintquote.services.tiers import TierSelector

NO_TIERS = TierSelector()


def surface(category, quantity, unit='sqft', scope=None):
    return SurfaceItem(category=category, quantity=quantity, unit=unit, scope=scope)


def test_rate_keys_start_with_the_surface_name():
    keys = rate_keys('Exterior Walls', 'exterior')
    assert keys[0] == 'Exterior Walls'
    assert 'exterior_exteriorWalls' in keys
    assert 'exteriorWalls' in keys
    assert 'walls' in keys
    assert 'walls_sqft' in keys
    assert len(keys) == len(set(keys))


def test_lookup_rate_matches_seeded_key_shapes():
    table = {'interior_walls': 1.5, 'door_unit': 85, 'ceilings_sqft': 1.1}
    assert lookup_rate(table, 'Walls', 'interior') == 1.5
    assert lookup_rate(table, 'Doors') == 85
    assert lookup_rate(table, 'Ceilings') == 1.1
    assert lookup_rate(table, 'Walls', 'exterior') is None


def test_rate_based_labor():
    rules = PricingRules.from_dict('rate_based_sqft', {'laborRates': {'walls': 1.5}})
    result = labor_cost(surface('Walls', 352), rules, NO_TIERS)
    assert result.cost == 528
    assert result.rate == 1.5
    assert not result.rate_missing


def test_missing_rate_prices_at_zero_and_flags_it():
    rules = PricingRules.from_dict('rate_based_sqft', {'laborRates': {'walls': 1.5}})
    result = labor_cost(surface('Cabinets', 20, LINEAR_FOOT), rules, NO_TIERS)
    assert result.cost == 0
    assert result.rate_missing


def test_rate_based_labor_with_tier_override():
    rules = PricingRules.from_dict('rate_based_sqft', {
        'laborRates': {'walls': 1.5},
        'gbbEnabled': True,
        'gbbRates': {'best': {'walls': 2.0}},
    })
    assert labor_cost(surface('Walls', 100), rules, TierSelector(True, 'best')).cost == 200
    assert labor_cost(surface('Walls', 100), rules, TierSelector(True, 'good')).cost == 150


def test_hourly_labor_from_production_rates():
    rules = PricingRules.from_dict('hourly_time_materials', {
        'billableLaborRate': 60,
        'crewSize': 2,
        'productionRates': {'walls': 200},
    })
    result = labor_cost(surface('Walls', 400), rules, NO_TIERS)
    assert result.hours == 2
    assert result.crew_hours == 1
    assert result.cost == 120


def test_zero_production_rate_is_flagged():
    rules = PricingRules.from_dict('hourly_time_materials', {
        'billableLaborRate': 60,
        'productionRates': {'walls': 0},
    })
    result = labor_cost(surface('Walls', 400), rules, NO_TIERS)
    assert result.cost == 0
    assert result.hours == 0
    assert result.rate_missing


def test_hourly_labor_uses_default_production_rates():
    rules = PricingRules.from_dict('hourly_time_materials', {'billableLaborRate': 50})
    assert labor_cost(surface('Ceilings', 500), rules, NO_TIERS).hours == 2
    assert labor_cost(surface('Doors', 8, UNIT_COUNT), rules, NO_TIERS).hours == 2
    assert labor_cost(surface('Pressure Washing', 600), rules, NO_TIERS).hours == 2


def test_hours_entered_directly():
    rules = PricingRules.from_dict('hourly_time_materials', {'billableLaborRate': 55})
    result = labor_cost(surface('Drywall Repair', 3, HOUR), rules, NO_TIERS)
    assert result.hours == 3
    assert result.cost == 165


def test_crew_size_changes_duration_not_cost():
    small = PricingRules.from_dict('hourly_time_materials', {'billableLaborRate': 50, 'crewSize': 1})
    large = PricingRules.from_dict('hourly_time_materials', {'billableLaborRate': 50, 'crewSize': 4})
    walls = surface('Walls', 1200)
    assert labor_cost(walls, small, NO_TIERS).cost == labor_cost(walls, large, NO_TIERS).cost
    assert labor_cost(walls, small, NO_TIERS).crew_hours == 4
    assert labor_cost(walls, large, NO_TIERS).crew_hours == 1


def test_production_based_prefers_rate_table():
    with_rates = PricingRules.from_dict('production_based', {'laborRates': {'walls': 1.0}})
    without = PricingRules.from_dict('production_based', {'billableLaborRate': 60})
    assert labor_cost(surface('Walls', 300), with_rates, NO_TIERS).cost == 300
    assert labor_cost(surface('Walls', 300), without, NO_TIERS).cost == 60


def test_unit_price_labor():
    rules = PricingRules.from_dict('flat_rate_unit', {'unitPrices': {'door_unit': 85}})
    result = labor_cost(surface('Doors', 4, UNIT_COUNT), rules, NO_TIERS)
    assert result.cost == 340
    assert result.rate == 85


def test_turnkey_price_uses_scope_rate():
    rules = PricingRules.from_dict('turnkey', {'turnkeyRate': 3.5, 'interiorRate': 3.25})
    assert turnkey_price(2000, 'interior', rules, NO_TIERS) == (6500, 3.25)
    assert turnkey_price(2000, 'exterior', rules, NO_TIERS) == (7000, 3.5)


def test_turnkey_price_tier_override():
    rules = PricingRules.from_dict('turnkey', {
        'turnkeyRate': 3.5,
        'gbbEnabled': True,
        'gbbTurnkeyRates': {'best': {'turnkeyRate': 4.5}},
    })
    total, rate = turnkey_price(1000, 'both', rules, TierSelector(True, 'best'))
    assert rate == 4.5
    assert total == pytest.approx(4500)


def test_turnkey_price_scaled_by_condition():
    rules = PricingRules.from_dict('turnkey', {'turnkeyRate': 3.5})
    total, rate = turnkey_price(2000, 'interior', rules, NO_TIERS, 'poor')
    assert rate == pytest.approx(4.375)
    assert total == pytest.approx(8750)

    assert turnkey_price(2000, 'interior', rules, NO_TIERS, 'Excellent')[0] == pytest.approx(6300)
    assert turnkey_price(2000, 'interior', rules, NO_TIERS) == (7000, 3.5)
    assert turnkey_price(2000, 'interior', rules, NO_TIERS, 'weathered') == (7000, 3.5)
