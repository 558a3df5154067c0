import pytest
from django.apps import apps
from django.core.cache import cache
from rest_framework.test import APIClient

from core.models import Role, User
from core.realtime.broadcast import normalize
from core.services.sessions import issue_token

PASSWORD = 'Corr3ct-Horse-Battery'


class RecordingBroadcaster:
    """Stands in for the channel layer and remembers what was published."""

    def __init__(self):
        self.events = []

    def publish(self, event, payload=None):
        self.events.append((event, normalize(payload or {})))
        return True

    async def apublish(self, event, payload=None, **extra):
        return self.publish(event, payload)

    def close(self):
        pass

    @property
    def names(self):
        return [name for name, _ in self.events]


@pytest.fixture(autouse=True)
def _fast_hasher(settings):
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


@pytest.fixture(autouse=True)
def _media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / 'uploads'


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def broadcaster(monkeypatch):
    recorder = RecordingBroadcaster()
    monkeypatch.setattr(apps.get_app_config('core'), 'broadcaster', recorder)
    return recorder


@pytest.fixture
def admin_user(db):
    # Created first and with an explicit id: this is the primary administrator.
    return User.objects.create_user(id=1, username='admin', password=PASSWORD, name='Admin', role=Role.ADMIN)


@pytest.fixture
def make_user(admin_user):
    counter = {'n': 0}

    def make(role, username=None, password=PASSWORD, **extra):
        counter['n'] += 1
        username = username or f'{role}{counter["n"]}'
        extra.setdefault('name', username.title())
        return User.objects.create_user(username=username, password=password, role=role, **extra)

    return make


def client_for(user) -> APIClient:
    client = APIClient()
    token, _ = issue_token(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    client.user = user
    return client


@pytest.fixture
def as_role(admin_user, make_user):
    """``as_role('doctor')`` returns an authenticated client for that role."""
    users = {Role.ADMIN: admin_user}

    def get(role):
        if role not in users:
            users[role] = make_user(role)
        return client_for(users[role])

    return get


@pytest.fixture
def anon():
    return APIClient()


@pytest.fixture
def patient(db):
    from core.models import Patient

    return Patient.objects.create(name='Amal Hassan', phone='0912345678', age=34, gender='female')
