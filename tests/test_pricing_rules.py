# tests/test_pricing_rules.py
import pytest

from paintquote.seeds import DEFAULT_PRICING_SCHEMES
from paintquote.services.pricing_rules import (
    PricingConfigurationError,
    PricingModel,
    PricingRules,
    defaults_from_config,
    normalize_model,
    summarize_rules,
    validate_pricing_rules,
)


def test_normalize_model():
    assert normalize_model('rate_based_sqft') is PricingModel.RATE_BASED_SQFT
    assert normalize_model('Turnkey') is PricingModel.TURNKEY
    assert normalize_model('sqft_turnkey') is PricingModel.TURNKEY
    assert normalize_model('unit_pricing') is PricingModel.FLAT_RATE_UNIT
    assert normalize_model(PricingModel.HOURLY_TIME_MATERIALS) is PricingModel.HOURLY_TIME_MATERIALS


def test_unknown_model_is_a_configuration_error():
    with pytest.raises(PricingConfigurationError):
        normalize_model('per_room_vibes')


def test_empty_rules_take_defaults():
    rules = PricingRules.from_dict('rate_based_sqft', None)
    assert rules.coverage == 350
    assert rules.cost_per_gallon == 40
    assert rules.coats == 2
    assert rules.include_materials
    assert rules.deposit_percent == 50
    assert not rules.tiering_enabled


def test_configured_defaults_apply():
    config = {'DEFAULT_COST_PER_GALLON': 55, 'DEFAULT_DEPOSIT_PERCENT': 25}
    rules = PricingRules.from_dict('rate_based_sqft', {}, defaults_from_config(config))
    assert rules.cost_per_gallon == 55
    assert rules.deposit_percent == 25


def test_aliases_and_labor_only_legacy_type():
    rules = PricingRules.from_dict('sqft_labor_only', {'taxRatePercentage': 7.5, 'hourlyLaborRate': 65})
    assert rules.model is PricingModel.RATE_BASED_SQFT
    assert not rules.include_materials
    assert rules.tax_percent == 7.5
    assert rules.billable_labor_rate == 65


def test_zero_deposit_is_kept():
    assert PricingRules.from_dict('rate_based_sqft', {'depositPercent': 0}).deposit_percent == 0


def test_all_in_models():
    assert PricingRules.from_dict('turnkey').is_all_in
    assert PricingRules.from_dict('flat_rate_unit').is_all_in
    assert not PricingRules.from_dict('production_based').is_all_in


def test_tier_tables_must_be_objects():
    with pytest.raises(PricingConfigurationError):
        PricingRules.from_dict('rate_based_sqft', {'gbbRates': ['good', 1.0]})
    with pytest.raises(PricingConfigurationError):
        PricingRules.from_dict('rate_based_sqft', {'laborRates': 1.5})
    with pytest.raises(PricingConfigurationError):
        PricingRules.from_dict('rate_based_sqft', 'walls=1.5')


def test_overrides_by_kind():
    rules = PricingRules.from_dict('rate_based_sqft', {'gbbRates': {'good': {'walls': 1.0}}})
    assert rules.overrides('labor') == {'good': {'walls': 1.0}}
    assert rules.overrides('material') == {}


def test_validate_clean_rules():
    assert validate_pricing_rules({'coverage': 350, 'coats': 2, 'laborRates': {'walls': 1.5}}) == []


def test_validate_reports_each_problem():
    issues = validate_pricing_rules({
        'coverage': 900,
        'coats': 0,
        'costPerGallon': -5,
        'laborRates': {'walls': -1},
        'gbbRates': {'best': {'walls': -2}},
        'overheadPercent': 140,
        'unitPrices': 'door=85',
    })
    found = {(issue['code'], issue['field']) for issue in issues}
    assert ('coverage_out_of_range', 'coverage') in found
    assert ('coats_out_of_range', 'coats') in found
    assert ('negative_rate', 'costPerGallon') in found
    assert ('negative_rate', 'laborRates.walls') in found
    assert ('negative_rate', 'gbbRates.best.walls') in found
    assert ('percent_out_of_range', 'overheadPercent') in found
    assert ('invalid_table', 'unitPrices') in found


def test_validate_non_object():
    assert validate_pricing_rules(['walls'])[0]['code'] == 'invalid_document'


def test_summaries():
    assert summarize_rules('turnkey', {'turnkeyRate': 3.5}).startswith('Turnkey · $3.50/sq ft of home')
    summary = summarize_rules('rate_based_sqft', {'laborRates': {'walls': 1.5}, 'gbbEnabled': True})
    assert 'Rate-based' in summary
    assert '1 labor rates' in summary
    assert 'good/better/best tiers' in summary
    assert 'labor only' in summarize_rules('sqft_labor_only', {})


def test_seeded_schemes_are_valid():
    for scheme in DEFAULT_PRICING_SCHEMES:
        assert validate_pricing_rules(scheme['pricing_rules']) == [], scheme['name']
        PricingRules.from_dict(scheme['type'], scheme['pricing_rules'])
