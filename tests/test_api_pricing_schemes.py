# tests/test_api_pricing_schemes.py
import pytest

from paintquote.models import db, PricingScheme
from paintquote.seeds import DEFAULT_PRICING_SCHEMES


def test_list_only_own_active_schemes(app, auth_client, account, other_account):
    with app.app_context():
        db.session.add(PricingScheme(
            tenant_id=account['tenant_id'],
            name='Retired Rates',
            type='rate_based_sqft',
            is_active=False,
            pricing_rules={},
        ))
        db.session.commit()

    response = auth_client.get('/api/pricing-schemes')
    assert response.status_code == 200
    schemes = response.get_json()
    assert [scheme['id'] for scheme in schemes] == [account['scheme_id']]
    assert schemes[0]['isDefault'] is True
    assert schemes[0]['pricingRules']['laborRates']['walls'] == 1.5


def test_other_tenants_scheme_is_not_found(auth_client, other_account):
    assert auth_client.get(f"/api/pricing-schemes/{other_account['scheme_id']}").status_code == 404
    response = auth_client.post(f"/api/pricing-schemes/{other_account['scheme_id']}/calculate", json={'areas': []})
    assert response.status_code == 404


def test_rules_endpoint(auth_client, account):
    response = auth_client.get(f"/api/pricing-schemes/{account['scheme_id']}/rules")
    assert response.status_code == 200
    data = response.get_json()
    assert data['type'] == 'rate_based_sqft'
    assert data['summary'].startswith('Rate-based')
    assert data['issues'] == []


def test_rules_endpoint_reports_issues(app, auth_client, account):
    with app.app_context():
        scheme = db.session.get(PricingScheme, account['scheme_id'])
        scheme.pricing_rules = {'coverage': 50, 'laborRates': 'walls'}
        db.session.commit()

    data = auth_client.get(f"/api/pricing-schemes/{account['scheme_id']}/rules").get_json()
    assert data['summary'] is None
    assert {issue['code'] for issue in data['issues']} == {'coverage_out_of_range', 'invalid_table'}


def test_calculate_with_scheme(auth_client, account, kitchen_quote_input):
    response = auth_client.post(f"/api/pricing-schemes/{account['scheme_id']}/calculate", json=kitchen_quote_input)
    assert response.status_code == 200
    data = response.get_json()
    assert data['success'] is True
    assert data['pricingScheme']['id'] == account['scheme_id']
    assert data['breakdown']['total'] == 1076.57
    assert data['breakdown']['lineItems'][0]['laborCost'] == 528


def test_calculate_with_scheme_refuses_incomplete_quote(auth_client, account):
    response = auth_client.post(
        f"/api/pricing-schemes/{account['scheme_id']}/calculate",
        json={'areas': [{'name': 'Garage', 'laborItems': []}]},
    )
    assert response.status_code == 422
    errors = response.get_json()['errors']
    assert errors[0]['code'] == 'no_selected_surfaces'
    assert errors[0]['area'] == 'Garage'


def test_calculate_with_unknown_tier_is_bad_request(auth_client, account, kitchen_quote_input):
    payload = dict(kitchen_quote_input, tier='platinum')
    response = auth_client.post(f"/api/pricing-schemes/{account['scheme_id']}/calculate", json=payload)
    assert response.status_code == 400


def test_calculate_without_body(auth_client, account):
    assert auth_client.post(f"/api/pricing-schemes/{account['scheme_id']}/calculate").status_code == 400


def test_seed_defaults_for_empty_tenant(app, auth_client, account):
    with app.app_context():
        PricingScheme.query.filter_by(tenant_id=account['tenant_id']).delete()
        db.session.commit()

    response = auth_client.post('/api/pricing-schemes/seed-defaults')
    assert response.status_code == 201
    assert response.get_json()['created'] == len(DEFAULT_PRICING_SCHEMES)

    # second run leaves the tenant alone
    again = auth_client.post('/api/pricing-schemes/seed-defaults')
    assert again.status_code == 200
    assert again.get_json()['created'] == 0

    schemes = auth_client.get('/api/pricing-schemes').get_json()
    assert schemes[0]['type'] == 'turnkey'
    assert len(schemes) == len(DEFAULT_PRICING_SCHEMES)


@pytest.fixture
def estimator_client(app, create_account, password):
    create_account('Estimating Only', 'estimator@paint.test', role='estimator')

    client = app.test_client()
    client.post('/api/auth/login', json={'email': 'estimator@paint.test', 'password': password})
    return client


def test_seed_defaults_requires_admin(estimator_client):
    response = estimator_client.post('/api/pricing-schemes/seed-defaults')
    assert response.status_code == 403
