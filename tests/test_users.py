import csv
import io
import os
import uuid

from PIL import Image

from conftest import ADMIN_EMAIL, USER_PASSWORD
from cyberscroll.models import DEFAULT_PREFERENCES


def png_bytes(size=(400, 300), color=(200, 30, 30)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, 'PNG')
    buffer.seek(0)
    return buffer


def test_profile_round_trip(client, user_token, auth_header):
    headers = auth_header(user_token)
    profile = client.get('/api/users/profile', headers=headers).get_json()['user']
    assert profile['email'] == 'alice@cyberscroll.com'
    assert 'passwordHash' not in profile

    resp = client.put('/api/users/profile', headers=headers, json={
        'jobTitle': 'Threat Hunter', 'organization': 'Blue Team', 'bio': 'Logs all day.'})
    assert resp.status_code == 200
    user = resp.get_json()['user']
    assert (user['jobTitle'], user['organization'], user['bio']) == ('Threat Hunter', 'Blue Team', 'Logs all day.')
    assert user['name'] == 'Alice Analyst'


def test_profile_email_must_be_unique(client, user_token, auth_header):
    headers = auth_header(user_token)
    taken = client.put('/api/users/profile', json={'email': ADMIN_EMAIL}, headers=headers)
    assert taken.status_code == 400
    assert taken.get_json()['message'] == 'Email is already in use'

    invalid = client.put('/api/users/profile', json={'email': 'nope'}, headers=headers)
    assert invalid.status_code == 400

    moved = client.put('/api/users/profile', json={'email': 'Alice.New@CyberScroll.com'}, headers=headers)
    assert moved.get_json()['user']['email'] == 'alice.new@cyberscroll.com'


def test_preferences_are_merged(client, user_token, auth_header):
    headers = auth_header(user_token)
    assert client.get('/api/users/preferences', headers=headers).get_json()['preferences'] == DEFAULT_PREFERENCES

    resp = client.put('/api/users/preferences', json={'preferences': {'theme': 'dark'}}, headers=headers)
    assert resp.status_code == 200

    preferences = client.get('/api/users/preferences', headers=headers).get_json()['preferences']
    assert preferences['theme'] == 'dark'
    assert preferences['emailNotifications'] is True

    bad = client.put('/api/users/preferences', json={'preferences': 'dark'}, headers=headers)
    assert bad.status_code == 400


def test_avatar_from_url(client, user_token, auth_header):
    resp = client.post('/api/users/avatar', json={'avatarUrl': 'https://cdn.cyberscroll.com/a.png'},
                       headers=auth_header(user_token))
    assert resp.status_code == 200
    assert resp.get_json()['user']['avatarUrl'] == 'https://cdn.cyberscroll.com/a.png'

    missing = client.post('/api/users/avatar', json={}, headers=auth_header(user_token))
    assert missing.status_code == 400


def test_avatar_upload_is_cropped_to_thumbnail(app, client, user_token, auth_header):
    resp = client.post('/api/users/avatar', data={'avatar': (png_bytes(), 'me.png', 'image/png')},
                       headers=auth_header(user_token), content_type='multipart/form-data')
    assert resp.status_code == 200
    avatar_url = resp.get_json()['avatarUrl']
    assert avatar_url.startswith('/uploads/avatars/')

    path = os.path.join(app.config['UPLOAD_FOLDER'], 'avatars', os.path.basename(avatar_url))
    with Image.open(path) as image:
        assert image.size == (200, 200)

    served = client.get(avatar_url)
    assert served.status_code == 200


def test_avatar_rejects_unsupported_files(client, user_token, auth_header):
    headers = auth_header(user_token)
    bmp = client.post('/api/users/avatar', data={'avatar': (png_bytes(), 'me.bmp', 'image/bmp')},
                      headers=headers, content_type='multipart/form-data')
    assert bmp.status_code == 400

    fake = client.post('/api/users/avatar', data={'avatar': (io.BytesIO(b'not an image'), 'me.png', 'image/png')},
                       headers=headers, content_type='multipart/form-data')
    assert fake.status_code == 400
    assert fake.get_json()['message'] == 'Avatar is not a valid image'


def test_export_json(client, make_article, user_token, auth_header):
    make_article(user_token, title='Exported article')
    headers = auth_header(user_token)

    full = client.post('/api/users/export', json={}, headers=headers).get_json()['data']
    assert [a['title'] for a in full['articles']] == ['Exported article']
    assert full['profile']['email'] == 'alice@cyberscroll.com'
    assert 'preferences' in full and 'documents' in full

    slim = client.post('/api/users/export', json={'includeDocuments': False, 'includeSettings': False},
                       headers=headers).get_json()['data']
    assert 'documents' not in slim and 'preferences' not in slim


def test_export_csv(client, make_article, user_token, auth_header):
    make_article(user_token, title='CSV article', tags=['Detection', 'Sigma'])
    resp = client.post('/api/users/export', json={'format': 'csv'}, headers=auth_header(user_token))
    assert resp.status_code == 200
    assert resp.mimetype == 'text/csv'
    assert resp.data.startswith('\ufeff'.encode('utf-8'))

    rows = list(csv.reader(io.StringIO(resp.data.decode('utf-8-sig'))))
    assert rows[0][:3] == ['ID', 'Title', 'Status']
    assert rows[1][1] == 'CSV article'
    assert rows[1][4] == 'Detection, Sigma'


def test_export_rejects_unknown_format(client, user_token, auth_header):
    resp = client.post('/api/users/export', json={'format': 'xml'}, headers=auth_header(user_token))
    assert resp.status_code == 400


def test_import_data(client, user_token, auth_header):
    headers = auth_header(user_token)
    resp = client.post('/api/users/import', headers=headers, json={'importData': {
        'preferences': {'theme': 'dark'},
        'articles': [
            {'title': 'Imported write-up', 'content': 'Recovered from the old blog export.', 'tags': ['DFIR']},
            {'title': 'x', 'content': 'Title is too short to import.'},
            'not an article',
        ],
    }})
    assert resp.status_code == 200
    assert resp.get_json()['imported'] == {'preferences': True, 'articles': 1, 'skipped': 2}

    articles = client.get('/api/articles?status=draft', headers=headers).get_json()['articles']
    assert [(a['title'], a['visibility']) for a in articles] == [('Imported write-up', 'private')]

    preferences = client.get('/api/users/preferences', headers=headers).get_json()['preferences']
    assert preferences['theme'] == 'dark'


def test_import_requires_payload(client, user_token, auth_header):
    assert client.post('/api/users/import', json={}, headers=auth_header(user_token)).status_code == 400


def test_delete_account(client, user_token, auth_header, user_count):
    headers = auth_header(user_token)
    before = user_count()

    wrong = client.delete('/api/users/account', json={'password': 'guess'}, headers=headers)
    assert wrong.status_code == 400
    assert wrong.get_json()['message'] == 'Invalid password'

    ok = client.delete('/api/users/account', json={'password': USER_PASSWORD}, headers=headers)
    assert ok.status_code == 200
    assert user_count() == before - 1

    login = client.post('/api/auth/login', json={'email': 'alice@cyberscroll.com', 'password': USER_PASSWORD})
    assert login.status_code == 401


def test_admin_lists_users(client, admin_token, user_token, other_token, auth_header):
    headers = auth_header(admin_token)
    everyone = client.get('/api/users', headers=headers).get_json()
    assert everyone['pagination']['total'] == 3

    found = client.get('/api/users?search=bob', headers=headers).get_json()
    assert [u['email'] for u in found['users']] == ['bob@cyberscroll.com']

    user_id = found['users'][0]['id']
    assert client.get(f'/api/users/{user_id}', headers=headers).get_json()['user']['name'] == 'Bob Builder'
    assert client.get('/api/users/not-a-uuid', headers=headers).status_code == 400
    assert client.get(f'/api/users/{uuid.uuid4()}', headers=headers).status_code == 404


def test_admin_messages(client, admin_token, auth_header):
    headers = auth_header(admin_token)
    client.post('/api/public/contact', json={
        'name': 'Eve', 'email': 'eve@cyberscroll.com', 'subject': 'Pentest quote', 'message': 'How much?'})

    inbox = client.get('/api/users/messages', headers=headers).get_json()
    assert inbox['unread'] == 2
    assert inbox['pagination']['total'] == 2
    assert inbox['messages'][0]['subject'] == 'Pentest quote'

    message_id = inbox['messages'][0]['id']
    read = client.put(f'/api/users/messages/{message_id}/read', headers=headers)
    assert read.get_json()['contactMessage']['status'] == 'read'

    unread = client.get('/api/users/messages?status=unread', headers=headers).get_json()
    assert unread['unread'] == 1
    assert [m['subject'] for m in unread['messages']] == ['Question about threat detection']

    assert client.put('/api/users/messages/oops/read', headers=headers).status_code == 400


def test_admin_audit_logs(client, admin_token, user_token, auth_header):
    client.post('/api/users/export', json={}, headers=auth_header(user_token))

    logs = client.get('/api/users/audit-logs?module=users', headers=auth_header(admin_token)).get_json()['logs']
    assert [log['action'] for log in logs] == ['export_data']
    assert logs[0]['details'] == {'format': 'json'}


def test_admin_routes_reject_users(client, user_token, auth_header):
    headers = auth_header(user_token)
    for url in ('/api/users', '/api/users/messages', '/api/users/audit-logs'):
        assert client.get(url, headers=headers).status_code == 403
