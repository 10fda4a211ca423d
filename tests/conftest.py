import json

import pytest
from channels.layers import channel_layers

from apps.board.notifications import fanout
from apps.board.store import board_store, project_store, task_store
from apps.core.auth_service import auth_service
from apps.core.models import User

PASSWORD = 'correct-horse-42'


def make_user(email, name):
    user = User(username=email, email=email, name=name)
    user.set_password(PASSWORD)
    user.save()
    return user


class ApiClient:
    """Django test client speaking JSON with an optional bearer token"""

    def __init__(self, client, token=None):
        self.client = client
        self.token = token

    def _headers(self):
        if self.token is None:
            return {}
        return {'HTTP_AUTHORIZATION': f'Bearer {self.token}'}

    def get(self, path):
        return self.client.get(path, **self._headers())

    def post(self, path, data=None, raw=None):
        body = raw if raw is not None else json.dumps(data or {})
        return self.client.post(path, data=body, content_type='application/json', **self._headers())

    def patch(self, path, data=None):
        return self.client.patch(path, data=json.dumps(data or {}),
                                 content_type='application/json', **self._headers())

    def put(self, path, data=None):
        return self.client.put(path, data=json.dumps(data or {}),
                               content_type='application/json', **self._headers())

    def delete(self, path):
        return self.client.delete(path, **self._headers())


@pytest.fixture(autouse=True)
def fresh_channel_layer():
    # In-memory layer queues are bound to the event loop that created them
    channel_layers.backends.clear()
    yield
    channel_layers.backends.clear()


@pytest.fixture
def user(db):
    return make_user('ana@example.com', 'Ana')


@pytest.fixture
def other_user(db):
    return make_user('bruno@example.com', 'Bruno')


@pytest.fixture
def token(user):
    return auth_service.issue_token(user)


@pytest.fixture
def api(client, token):
    return ApiClient(client, token)


@pytest.fixture
def anon_api(client):
    return ApiClient(client)


@pytest.fixture
def other_api(client, other_user):
    return ApiClient(client, auth_service.issue_token(other_user))


@pytest.fixture
def project(user):
    return project_store.create(user, name='Roadmap')


@pytest.fixture
def boards(project):
    return [board_store.create(project.id, name=name) for name in ('Todo', 'Doing', 'Done')]


@pytest.fixture
def tasks(boards):
    return [task_store.create(boards[0].id, title=f'Task {i}') for i in range(3)]


@pytest.fixture
def published(monkeypatch):
    """Capture fanout.publish calls as (scope, kind, data) tuples"""
    events = []
    monkeypatch.setattr(
        fanout, 'publish',
        lambda scope, kind, data, audience=None: events.append((str(scope), kind, data))
    )
    return events
