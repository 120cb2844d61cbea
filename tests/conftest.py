# tests/conftest.py
import pytest

from paintquote.app import create_app
from paintquote.models import db, Tenant, User, PricingScheme

PASSWORD = 'paint-it-all'

RATE_RULES = {
    'coverage': 350,
    'costPerGallon': 40,
    'coats': 2,
    'includeMaterials': True,
    'laborRates': {'walls': 1.5, 'ceilings': 1.0, 'doors': 50},
    'overheadPercent': 10,
    'profitMarginPercent': 15,
    'taxPercent': 8,
    'depositPercent': 30,
}

KITCHEN = {
    'name': 'Kitchen',
    'laborItems': [
        {
            'categoryName': 'Walls',
            'selected': True,
            'dimensions': {'length': 12, 'width': 10, 'height': 8},
        },
        {
            'categoryName': 'Ceilings',
            'selected': True,
            'dimensions': {'length': 12, 'width': 10},
        },
    ],
}


def make_tenant(name, email, role='admin'):
    tenant = Tenant(name=name)
    db.session.add(tenant)
    db.session.flush()

    user = User(tenant_id=tenant.id, email=email, first_name='Pat', last_name='Painter', role=role)
    user.set_password(PASSWORD)
    db.session.add(user)

    scheme = PricingScheme(
        tenant_id=tenant.id,
        name='Interior Rates',
        type='rate_based_sqft',
        is_default=True,
        is_active=True,
        pricing_rules=dict(RATE_RULES),
    )
    db.session.add(scheme)
    db.session.commit()
    return {'tenant_id': tenant.id, 'user_id': user.id, 'email': email, 'scheme_id': scheme.id}


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def account(app):
    with app.app_context():
        return make_tenant('Brush & Roller Co', 'owner@brushroller.test')


@pytest.fixture
def other_account(app):
    with app.app_context():
        return make_tenant('Rival Painting', 'owner@rival.test')


@pytest.fixture
def auth_client(client, account):
    response = client.post('/api/auth/login', json={'email': account['email'], 'password': PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def kitchen_quote_input():
    return {'jobType': 'interior', 'areas': [KITCHEN]}


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def create_account(app):
    def create(name, email, role='admin'):
        with app.app_context():
            return make_tenant(name, email, role=role)
    return create
