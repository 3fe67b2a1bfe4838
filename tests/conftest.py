from datetime import datetime, timedelta

import pytest

from app import create_app
from local_store import LocalStore

NOW = datetime(2026, 10, 19, 10, 0, 0)

DEMO_LOGINS = {
    'super_admin': ('super@example.com', 'super123'),
    'admin': ('admin@example.com', 'admin123'),
    'organizer': ('organizer@example.com', 'organizer123'),
    'participant': ('user@example.com', 'user123'),
}


class TickingClock:
    """呼ばれるたびに1分ずつ進む時計"""

    def __init__(self, start=NOW):
        self.current = start

    def __call__(self):
        value = self.current
        self.current += timedelta(minutes=1)
        return value


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', test_config={
        'STORAGE_PATH': str(tmp_path / 'local_store.json'),
        'CLOCK': lambda: NOW,
    })
    yield app


@pytest.fixture
def services(app):
    return app.extensions['beach_volley']


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(app):
    """指定したデモアカウントでログイン済みのクライアントを返す"""
    def _login(role):
        email, password = DEMO_LOGINS[role]
        client = app.test_client()
        response = client.post('/api/auth/login', json={'email': email, 'password': password})
        assert response.status_code == 200
        return client
    return _login


@pytest.fixture
def users(services):
    return {
        'super_admin': services.users.get_user('super_admin_001'),
        'admin': services.users.get_user('admin_001'),
        'organizer': services.users.get_user('organizer_001'),
        'participant': services.users.get_user('user_001'),
    }


@pytest.fixture
def store(tmp_path):
    return LocalStore(str(tmp_path / 'store.json'))


def practice_payload(**overrides):
    data = {
        'name': '土曜 練習会',
        'type': 'practice',
        'event_date': '2026-11-07',
        'start_time': '10:00',
        'end_time': '12:00',
        'venue': '大宮市民体育館',
        'prefecture': '埼玉県',
        'max_participants': 12,
        'entry_fee': 500,
        'beginner_friendly': True,
    }
    data.update(overrides)
    return data
