from conftest import ADMIN_EMAIL, USER_PASSWORD, register


def test_register_returns_user_and_token(client):
    resp = register(client, email='Carol@CyberScroll.com')
    assert resp.status_code == 201
    data = resp.get_json()
    assert data['user']['email'] == 'carol@cyberscroll.com'
    assert data['user']['role'] == 'user'
    assert 'passwordHash' not in data['user']
    assert data['token']


def test_register_duplicate_email_is_rejected(client, user_count):
    before = user_count()
    resp = register(client, email=ADMIN_EMAIL.upper())
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'User already exists with this email'
    assert user_count() == before


def test_register_rejects_weak_password(client, user_count):
    before = user_count()
    resp = register(client, password='password')
    assert resp.status_code == 400
    assert resp.get_json()['success'] is False
    assert 'password' in resp.get_json()['errors']
    assert user_count() == before


def test_register_validates_email_and_name(client):
    resp = client.post('/api/auth/register', json={'name': 'A', 'email': 'not-an-email', 'password': USER_PASSWORD})
    assert resp.status_code == 400
    errors = resp.get_json()['errors']
    assert 'name' in errors and 'email' in errors


def test_register_rejects_non_object_body(client):
    resp = client.post('/api/auth/register', json=['alice'])
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Request body must be a JSON object'


def test_login_success_and_failure(client):
    ok = client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': 'password'})
    assert ok.status_code == 200
    assert ok.get_json()['user']['role'] == 'admin'

    wrong = client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': 'nope'})
    assert wrong.status_code == 401
    assert wrong.get_json()['message'] == 'Invalid email or password'

    unknown = client.post('/api/auth/login', json={'email': 'ghost@cyberscroll.com', 'password': 'x'})
    assert unknown.status_code == 401


def test_me_requires_token(client, user_token, auth_header):
    assert client.get('/api/auth/me').status_code == 401

    resp = client.get('/api/auth/me', headers=auth_header(user_token))
    assert resp.status_code == 200
    assert resp.get_json()['user']['email'] == 'alice@cyberscroll.com'


def test_change_password(client, user_token, auth_header):
    headers = auth_header(user_token)
    wrong = client.post('/api/auth/change-password',
                        json={'currentPassword': 'bad', 'newPassword': 'N3w!Passw0rd'}, headers=headers)
    assert wrong.status_code == 400

    ok = client.post('/api/auth/change-password',
                     json={'currentPassword': USER_PASSWORD, 'newPassword': 'N3w!Passw0rd'}, headers=headers)
    assert ok.status_code == 200

    login = client.post('/api/auth/login', json={'email': 'alice@cyberscroll.com', 'password': 'N3w!Passw0rd'})
    assert login.status_code == 200


def test_password_whitespace_is_kept(client, auth_header):
    padded = f' {USER_PASSWORD} '
    token = register(client, email='dave@cyberscroll.com', password=padded).get_json()['token']

    login = client.post('/api/auth/login', json={'email': 'dave@cyberscroll.com', 'password': padded})
    assert login.status_code == 200
    trimmed = client.post('/api/auth/login', json={'email': 'dave@cyberscroll.com', 'password': USER_PASSWORD})
    assert trimmed.status_code == 401

    changed = client.post('/api/auth/change-password', headers=auth_header(token),
                          json={'currentPassword': USER_PASSWORD, 'newPassword': 'N3w!Passw0rd'})
    assert changed.status_code == 400


def test_refresh_and_logout(client, user_token, auth_header):
    resp = client.post('/api/auth/refresh', headers=auth_header(user_token))
    assert resp.status_code == 200
    assert resp.get_json()['token']

    assert client.post('/api/auth/logout', headers=auth_header(user_token)).status_code == 200


def test_admin_login_requires_key(client):
    assert client.post('/api/auth/admin-login', json={}).status_code == 400
    assert client.post('/api/auth/admin-login', json={'adminKey': 'guess'}).status_code == 401


def test_admin_login_returns_admin_token(client, auth_header):
    resp = client.post('/api/auth/admin-login', json={'adminKey': 'cyberscroll-admin-2024'})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['user']['email'] == ADMIN_EMAIL

    users = client.get('/api/users', headers=auth_header(data['token']))
    assert users.status_code == 200


def test_verify_admin_key(client):
    ok = client.post('/api/auth/verify-admin-key', json={'adminKey': 'cyberscroll-admin-2024'})
    assert ok.status_code == 200
    assert ok.get_json()['valid'] is True
    assert 'token' not in ok.get_json()

    assert client.post('/api/auth/verify-admin-key', json={'adminKey': 'wrong'}).status_code == 401


def test_admin_access_log_records_attempts(client, admin_token, user_token, auth_header):
    client.post('/api/auth/admin-login', json={'adminKey': 'wrong'})
    client.post('/api/auth/admin-login', json={'adminKey': 'cyberscroll-admin-2024'})

    assert client.get('/api/auth/admin-access-log', headers=auth_header(user_token)).status_code == 403

    resp = client.get('/api/auth/admin-access-log', headers=auth_header(admin_token))
    assert resp.status_code == 200
    actions = [log['action'] for log in resp.get_json()['logs']]
    assert actions == ['admin_login_success', 'admin_login_failed']
    assert resp.get_json()['logs'][1]['details'] == {'reason': 'invalid admin key'}


def test_logout_is_audited(client, user_token, admin_token, auth_header):
    client.post('/api/auth/logout', headers=auth_header(user_token))
    logs = client.get('/api/users/audit-logs?module=auth', headers=auth_header(admin_token)).get_json()['logs']
    assert 'logout' in [log['action'] for log in logs]
