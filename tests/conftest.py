"""Pytest configuration for CyberScroll."""
import pytest

from cyberscroll import create_app
from cyberscroll.models import User
from cyberscroll.utils import security


ADMIN_EMAIL = 'francis@cyberscroll.com'
ADMIN_PASSWORD = 'password'
USER_PASSWORD = 'Str0ng!Pass'


@pytest.fixture
def app(tmp_path):
    """每个测试一个全新的内存库（已写入演示数据）"""
    return create_app('testing', {'UPLOAD_FOLDER': str(tmp_path / 'uploads')})


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """限流计数是进程级的，每个测试前清空"""
    security._rate_limit_storage.clear()
    yield
    security._rate_limit_storage.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_header():
    def _header(token):
        return {'Authorization': f'Bearer {token}'}
    return _header


@pytest.fixture
def admin_token(client):
    resp = client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert resp.status_code == 200
    return resp.get_json()['token']


def register(client, name='Alice Analyst', email='alice@cyberscroll.com', password=USER_PASSWORD):
    return client.post('/api/auth/register', json={'name': name, 'email': email, 'password': password})


@pytest.fixture
def user_token(client):
    resp = register(client)
    assert resp.status_code == 201
    return resp.get_json()['token']


@pytest.fixture
def other_token(client):
    resp = register(client, name='Bob Builder', email='bob@cyberscroll.com')
    assert resp.status_code == 201
    return resp.get_json()['token']


@pytest.fixture
def public_article(client):
    """演示数据中最新发布的公开文章"""
    return client.get('/api/public/articles').get_json()['articles'][0]


@pytest.fixture
def make_article(client, auth_header):
    def _make(token, **fields):
        payload = {
            'title': 'Detecting Beaconing Traffic',
            'content': 'Beaconing shows up as periodic outbound connections to rare hosts.',
        }
        payload.update(fields)
        resp = client.post('/api/articles', json=payload, headers=auth_header(token))
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()['article']
    return _make


@pytest.fixture
def user_count(app):
    def _count():
        with app.app_context():
            return User.query.count()
    return _count
