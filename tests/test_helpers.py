import logging
from email.message import EmailMessage

import pytest

from cyberscroll import create_app
from cyberscroll.seed import entity_counts
from cyberscroll.services.article_service import ArticleService, normalize_tags
from cyberscroll.services import notification_service
from cyberscroll.services.notification_service import NotificationService, send_mail
from cyberscroll.utils.file_helper import format_size, matches_type, get_file_extension, safe_extension
from cyberscroll.utils.pagination import pagination_meta, paginate_list
from cyberscroll.utils.security import sanitize_input, check_password_strength
from cyberscroll.utils.validators import is_valid_uuid


def test_health(client):
    data = client.get('/health').get_json()
    assert data['status'] == 'OK'
    assert data['uptime'] >= 0
    assert data['timestamp']


def test_unknown_route_returns_json_404(client):
    resp = client.get('/api/nowhere')
    assert resp.status_code == 404
    assert resp.get_json() == {
        'success': False, 'error': 'Not Found', 'message': 'Route /api/nowhere not found', 'code': 404}


def test_cors_headers_and_preflight(app, client):
    resp = client.get('/api/public/articles')
    assert resp.headers['Access-Control-Allow-Origin'] == app.config['FRONTEND_URL']

    preflight = client.open('/api/articles', method='OPTIONS')
    assert preflight.status_code == 200
    assert 'Authorization' in preflight.headers['Access-Control-Allow-Headers']

    assert 'Access-Control-Allow-Origin' not in client.get('/health').headers


@pytest.mark.parametrize('page, limit, total, pages', [
    (1, 10, 0, 0),
    (1, 10, 10, 1),
    (2, 10, 11, 2),
    (1, 3, 10, 4),
])
def test_pagination_meta(page, limit, total, pages):
    assert pagination_meta(page, limit, total) == {'page': page, 'limit': limit, 'total': total, 'pages': pages}


def test_paginate_list_slices():
    items, meta = paginate_list(list(range(7)), page=3, limit=3)
    assert items == [6]
    assert meta['pages'] == 3

    beyond, _ = paginate_list(list(range(7)), page=5, limit=3)
    assert beyond == []


@pytest.mark.parametrize('size, expected', [
    (0, '0 Bytes'),
    (512, '512 Bytes'),
    (1024, '1 KB'),
    (2400000, '2.29 MB'),
    (3 * 1024 ** 3, '3 GB'),
])
def test_format_size(size, expected):
    assert format_size(size) == expected


@pytest.mark.parametrize('mimetype, type_filter, expected', [
    ('image/png', 'images', True),
    ('application/pdf', 'images', False),
    ('application/pdf', 'documents', True),
    ('application/vnd.openxmlformats-officedocument.wordprocessingml.document', 'documents', True),
    ('application/x-zip-compressed', 'archives', True),
    ('text/plain', 'plain', True),
])
def test_matches_type(mimetype, type_filter, expected):
    assert matches_type(mimetype, type_filter) is expected


def test_file_extension():
    assert get_file_extension('Report.PDF') == 'pdf'
    assert get_file_extension('README') is None


@pytest.mark.parametrize('filename, mimetype, expected', [
    ('Report.PDF', 'application/pdf', '.pdf'),
    ('photo.jpeg', 'image/jpeg', '.jpeg'),
    ('evil.html', 'text/plain', ''),
    ('payload.pdf', 'image/png', ''),
    ('../../etc/diagram.png', 'image/png', '.png'),
    ('notes.v2/final', 'text/plain', ''),
    ('README', 'text/plain', ''),
])
def test_safe_extension(filename, mimetype, expected):
    assert safe_extension(filename, mimetype) == expected


def test_make_excerpt_collapses_whitespace():
    assert ArticleService.make_excerpt('one\n\n two   three') == 'one two three'
    long_text = 'word ' * 100
    excerpt = ArticleService.make_excerpt(long_text)
    assert excerpt.endswith('...')
    assert len(excerpt) <= 203


def test_normalize_tags():
    assert normalize_tags([' Detection', 'detection', '', 'CloudSec']) == {'detection', 'cloudsec'}
    assert normalize_tags(None) == set()


def test_sanitize_input():
    assert sanitize_input('  <b>bold</b> move ') == 'bold move'
    assert sanitize_input('') == ''


@pytest.mark.parametrize('password, ok', [
    ('Str0ng!Pass', True),
    ('short1!', False),
    ('alllowercase1!', False),
    ('ALLUPPERCASE1!', False),
    ('NoDigits!!', False),
    ('NoSpecial123', False),
])
def test_password_strength(password, ok):
    assert check_password_strength(password)[0] is ok


def test_is_valid_uuid():
    assert is_valid_uuid('550e8400-e29b-41d4-a716-446655440000')
    assert not is_valid_uuid('550e8400')
    assert not is_valid_uuid(None)


def test_notification_without_mail_settings_only_logs(app):
    subject, body = NotificationService.render('share', article_title='Zero Trust', visitor_id='v1',
                                               platform='linkedin')
    assert subject == 'Content Shared: "Zero Trust"'
    assert 'linkedin' in body

    with app.app_context():
        assert NotificationService.notify_admin('like', article_title='Zero Trust', visitor_id='v1') is False


class FakeSMTP:
    sent = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        self.user = user

    def send_message(self, message):
        FakeSMTP.sent.append(message)


def test_send_mail_delivers_message(monkeypatch):
    FakeSMTP.sent = []
    monkeypatch.setattr(notification_service.smtplib, 'SMTP', FakeSMTP)
    message = EmailMessage()
    message['Subject'] = 'New Like on "Zero Trust"'
    message['To'] = 'francis@cyberscroll.com'
    message.set_content('Visitor v1 liked "Zero Trust".')

    settings = {'SMTP_HOST': 'smtp.example.com', 'SMTP_PORT': 587,
                'EMAIL_USER': 'alerts@cyberscroll.com', 'EMAIL_PASS': 'app-password'}
    assert send_mail(settings, message, 'like', logging.getLogger('cyberscroll')) is True
    assert FakeSMTP.sent == [message]


def test_forge_and_status_commands(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['forge', '--scale', '1'])
    assert result.exit_code == 0, result.output
    with app.app_context():
        counts = entity_counts()
    assert counts['articles'] == 3 + 10
    assert counts['users'] == 1
    assert counts['categories'] == 8

    status = runner.invoke(args=['status'])
    assert status.exit_code == 0
    assert '数据已加载' in status.output


def test_seed_promotions_log_article_ids(tmp_path, caplog):
    with caplog.at_level(logging.INFO):
        create_app('testing', {'UPLOAD_FOLDER': str(tmp_path / 'uploads'), 'LOG_LEVEL': 'INFO'})

    promoted = [r.getMessage() for r in caplog.records if r.getMessage().startswith('文章晋升精选')]
    assert len(promoted) == 3
    assert all(is_valid_uuid(message.split()[1]) for message in promoted)
