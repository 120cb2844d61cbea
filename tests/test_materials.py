# tests/test_materials.py
import math

import pytest

from paintquote.services.measurements import LINEAR_FOOT, SurfaceItem
from paintquote.services.materials import (
    apply_markup,
    cost_per_gallon_for,
    effective_coverage,
    find_product_set,
    gallons_required,
    product_price_for,
    round_up_to_half_gallon,
    split_all_in_price,
    surface_material,
)
from paintquote.services.pricing_rules import PricingRules
from paintquote.services.tiers import Tier, TierSelector


def walls(quantity, **extra):
    return SurfaceItem(category='Walls', quantity=quantity, **extra)


def test_round_up_to_half_gallon():
    assert round_up_to_half_gallon(0) == 0
    assert round_up_to_half_gallon(-1) == 0
    assert round_up_to_half_gallon(0.1) == 0.5
    assert round_up_to_half_gallon(0.5) == 0.5
    assert round_up_to_half_gallon(2.01) == 2.5
    assert round_up_to_half_gallon(3.0) == 3.0


@pytest.mark.parametrize('raw', [0.01, 0.49, 1.2, 1.5, 7.77, 12.0, 99.26])
def test_rounded_gallons_cover_the_need_within_half_a_gallon(raw):
    rounded = round_up_to_half_gallon(raw)
    assert rounded >= raw
    assert rounded - raw < 0.5
    assert math.isclose(rounded * 2, round(rounded * 2))


def test_gallons_for_a_painted_room():
    # 352 sq ft of walls, two coats at 350 sq ft/gal
    assert gallons_required(352, 2, 350) == 2.5
    assert gallons_required(120, 2, 350) == 1.0


def test_gallons_zero_inputs():
    assert gallons_required(0, 2, 350) == 0
    assert gallons_required(352, 0, 350) == 0
    assert gallons_required(352, 2, 0) == 0


def test_spray_lowers_stock_coverage_only():
    assert effective_coverage(350, 'spray') == 300
    assert effective_coverage(350, 'roll') == 350
    assert effective_coverage(400, 'spray') == 400
    assert effective_coverage(None, 'roll') == 350


def test_surface_material_uses_scheme_coats_and_coverage():
    rules = PricingRules.from_dict('rate_based_sqft', {'coverage': 350, 'coats': 2})
    result = surface_material(walls(352), rules, 40)
    assert result.gallons == 2.5
    assert result.raw_cost == 100
    assert not result.manual


def test_surface_coats_beat_scheme_coats():
    rules = PricingRules.from_dict('rate_based_sqft', {'coats': 2})
    assert surface_material(walls(350, coats=3), rules, 40).gallons == 3.0


def test_manual_gallons_are_kept_when_allowed():
    rules = PricingRules.from_dict('rate_based_sqft', {})
    item = walls(352, gallons=4, allow_manual_gallons=True)
    result = surface_material(item, rules, 40)
    assert result.gallons == 4
    assert result.raw_cost == 160
    assert result.manual

    # without the flag the entered value is ignored
    assert surface_material(walls(352, gallons=4), rules, 40).gallons == 2.5


def test_non_area_surfaces_take_no_paint():
    rules = PricingRules.from_dict('rate_based_sqft', {})
    trim = SurfaceItem(category='Trim', quantity=80, unit=LINEAR_FOOT)
    result = surface_material(trim, rules, 40)
    assert result.gallons == 0
    assert result.raw_cost == 0


def test_apply_markup():
    assert apply_markup(200, 25) == (50, 250)
    assert apply_markup(200, 0) == (0, 200)


def test_split_all_in_price():
    assert split_all_in_price(1000, True) == pytest.approx((600, 400))
    assert split_all_in_price(1000, False) == (1000, 0)


def test_find_product_set_by_key_or_list():
    keyed = {'Walls': {'pricePerGallon': 55}}
    listed = [{'surfaceType': 'ceilings', 'pricePerGallon': 35}]
    assert find_product_set(keyed, 'walls') == {'pricePerGallon': 55}
    assert find_product_set(listed, 'Ceilings')['pricePerGallon'] == 35
    assert find_product_set(listed, 'Walls') is None
    assert find_product_set(None, 'Walls') is None


def test_product_price_for_tier():
    product_set = {
        'pricePerGallon': 45,
        'products': {
            'good': {'pricePerGallon': 30},
            'best': {'price': 70},
        },
    }
    assert product_price_for(product_set, Tier.GOOD) == 30
    assert product_price_for(product_set, Tier.BEST) == 70
    assert product_price_for(product_set, Tier.BETTER) == 45
    assert product_price_for(product_set, None) == 45


def test_cost_per_gallon_precedence():
    rules = PricingRules.from_dict('rate_based_sqft', {
        'costPerGallon': 40,
        'gbbEnabled': True,
        'gbbMaterialSettings': {'best': {'costPerGallon': 65}},
    })
    product_sets = {'walls': {'products': {'good': {'pricePerGallon': 28}}}}

    assert cost_per_gallon_for('Walls', rules, product_sets, TierSelector(True, 'good')) == 28
    assert cost_per_gallon_for('Walls', rules, product_sets, TierSelector(True, 'best')) == 65
    assert cost_per_gallon_for('Walls', rules, product_sets, TierSelector(True, 'better')) == 40
    assert cost_per_gallon_for('Ceilings', rules, None, TierSelector(False, None)) == 40


def test_tier_products_ignored_when_scheme_has_no_tiers():
    rules = PricingRules.from_dict('rate_based_sqft', {'costPerGallon': 40, 'gbbEnabled': False})
    product_sets = {'walls': {'products': {'best': {'pricePerGallon': 90}}}}

    assert cost_per_gallon_for('Walls', rules, product_sets, TierSelector(False, 'best')) == 40
    assert cost_per_gallon_for('Walls', rules, {'walls': {'pricePerGallon': 55}}, TierSelector(False, 'best')) == 55
