# tests/test_tiers.py
import pytest

from paintquote.services.pricing_rules import PricingConfigurationError
from paintquote.services.tiers import Tier, TierSelector, lookup, normalize_key, parse_tier

OVERRIDES = {
    'good': {'walls': 1.25},
    'better': {'interior_walls': 1.75},
    'best': {'walls': 2.25, 'ceilings': ''},
}


def test_parse_tier():
    assert parse_tier('Good') is Tier.GOOD
    assert parse_tier(' best ') is Tier.BEST
    assert parse_tier(Tier.BETTER) is Tier.BETTER
    assert parse_tier(None) is None
    assert parse_tier('') is None
    assert parse_tier('single') is None


def test_parse_tier_rejects_unknown():
    with pytest.raises(PricingConfigurationError):
        parse_tier('premium')


def test_normalize_key():
    assert normalize_key('Exterior Walls') == 'exteriorwalls'
    assert normalize_key('exterior_walls') == 'exteriorwalls'
    assert normalize_key('exteriorWalls') == 'exteriorwalls'


def test_lookup_tries_keys_in_order():
    table = {'walls': 1.5, 'Interior Walls': '1.8'}
    assert lookup(table, ['interior_walls', 'walls']) == 1.8
    assert lookup(table, ['ceilings', 'walls']) == 1.5
    assert lookup(table, ['ceilings']) is None
    assert lookup({}, ['walls']) is None


def test_lookup_skips_blank_and_junk_values():
    assert lookup({'walls': '', 'wall': 'n/a', 'Walls': 2}, ['walls', 'wall']) is None
    assert lookup({'walls': '', 'wall': 1.1}, ['walls', 'wall']) == 1.1


def test_disabled_selector_returns_base():
    selector = TierSelector(enabled=False, tier='best')
    assert not selector.active
    assert selector.resolve(1.5, OVERRIDES, 'walls') == 1.5


def test_selector_without_tier_returns_base():
    selector = TierSelector(enabled=True, tier=None)
    assert not selector.active
    assert selector.resolve(1.5, OVERRIDES, 'walls') == 1.5


def test_selector_uses_override_for_active_tier():
    assert TierSelector(True, 'good').resolve(1.5, OVERRIDES, 'walls') == 1.25
    assert TierSelector(True, 'best').resolve(1.5, OVERRIDES, 'walls') == 2.25
    assert TierSelector(True, 'better').resolve(1.5, OVERRIDES, 'interior_walls', 'walls') == 1.75


def test_selector_falls_back_when_override_absent():
    assert TierSelector(True, 'better').resolve(1.5, OVERRIDES, 'walls') == 1.5
    assert TierSelector(True, 'best').resolve(1.0, OVERRIDES, 'ceilings') == 1.0
    assert TierSelector(True, 'good').resolve(1.0, {}, 'walls') == 1.0
    assert TierSelector(True, 'good').resolve(1.0, {'good': 'oops'}, 'walls') == 1.0


def test_override_can_fill_a_missing_base():
    assert TierSelector(True, 'good').resolve(None, OVERRIDES, 'walls') == 1.25
