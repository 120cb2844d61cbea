# tests/test_api_auth.py
from paintquote.models import db, User


def test_login_and_me(client, account, password):
    response = client.post('/api/auth/login', json={'email': 'Owner@BrushRoller.test', 'password': password})
    assert response.status_code == 200
    assert response.get_json()['user']['email'] == account['email']

    me = client.get('/api/auth/me')
    assert me.status_code == 200
    data = me.get_json()
    assert data['id'] == account['user_id']
    assert data['tenant']['name'] == 'Brush & Roller Co'
    assert data['last_login'] is not None


def test_login_requires_both_fields(client, account):
    assert client.post('/api/auth/login', json={'email': account['email']}).status_code == 400
    assert client.post('/api/auth/login', data='not json').status_code == 400


def test_login_rejects_bad_password(client, account):
    response = client.post('/api/auth/login', json={'email': account['email'], 'password': 'wrong'})
    assert response.status_code == 401
    assert response.get_json()['error'] == 'Invalid email or password'


def test_login_rejects_disabled_user(app, client, account, password):
    with app.app_context():
        db.session.get(User, account['user_id']).is_active = False
        db.session.commit()

    response = client.post('/api/auth/login', json={'email': account['email'], 'password': password})
    assert response.status_code == 401


def test_protected_routes_answer_json_401(client):
    response = client.get('/api/quotes')
    assert response.status_code == 401
    assert response.get_json()['code'] == 'UNAUTHORIZED'


def test_logout(auth_client):
    response = auth_client.post('/api/auth/logout')
    assert response.status_code == 200
    assert response.get_json()['was_authenticated'] is True
    assert auth_client.get('/api/auth/me').status_code == 401


def test_disabled_user_loses_access_mid_session(app, auth_client, account):
    assert auth_client.get('/api/quotes').status_code == 200

    with app.app_context():
        db.session.get(User, account['user_id']).is_active = False
        db.session.commit()

    response = auth_client.get('/api/quotes')
    assert response.status_code == 403
    assert 'disabled' in response.get_json()['error']
    assert auth_client.get('/api/pricing-schemes').status_code == 403
