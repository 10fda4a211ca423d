import uuid

import jwt
import pytest
from django.conf import settings

from apps.core.models import Board, Project, Task, User

from .conftest import PASSWORD


# === REGISTRATION / LOGIN ===

def test_register_returns_user_without_password(anon_api, db):
    response = anon_api.post('/api/register', {
        'email': 'Carla@Example.com', 'password': 'long-enough-pw', 'name': 'Carla',
    })

    assert response.status_code == 201
    body = response.json()
    assert body['email'] == 'carla@example.com'
    assert body['name'] == 'Carla'
    assert 'password' not in body
    assert User.objects.filter(email='carla@example.com').exists()


def test_register_requires_all_fields(anon_api, db):
    response = anon_api.post('/api/register', {'email': 'x@example.com', 'name': 'X'})

    assert response.status_code == 400
    assert response.json() == {'message': 'All fields are required'}


def test_register_rejects_short_password(anon_api, db):
    response = anon_api.post('/api/register', {'email': 'x@example.com', 'password': 'short', 'name': 'X'})
    assert response.status_code == 400


def test_register_duplicate_email(anon_api, user):
    response = anon_api.post('/api/register', {
        'email': user.email, 'password': 'long-enough-pw', 'name': 'Again',
    })
    assert response.status_code == 409


def test_login_returns_token(anon_api, user):
    response = anon_api.post('/api/login', {'email': user.email, 'password': PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body['id'] == str(user.id)
    payload = jwt.decode(body['token'], settings.AUTH_TOKEN_SECRET, algorithms=['HS256'])
    assert payload['id'] == str(user.id)


@pytest.mark.parametrize('email, password', [
    ('ana@example.com', 'wrong-password'),
    ('nobody@example.com', PASSWORD),
])
def test_login_invalid_credentials(anon_api, user, email, password):
    response = anon_api.post('/api/login', {'email': email, 'password': password})

    assert response.status_code == 401
    assert response.json() == {'message': 'Invalid credentials'}


def test_login_requires_fields(anon_api, db):
    assert anon_api.post('/api/login', {'email': 'a@example.com'}).status_code == 400


def test_malformed_json_body(anon_api, db):
    response = anon_api.post('/api/register', raw='{not json')
    assert response.status_code == 400


# === TOKENS ===

def test_missing_token_is_401(anon_api, db):
    assert anon_api.get('/api/projects').status_code == 401


def test_invalid_token_is_403(client, db):
    response = client.get('/api/projects', HTTP_AUTHORIZATION='Bearer not-a-jwt')
    assert response.status_code == 403


def test_token_of_deleted_user_is_403(api, user):
    user.delete()
    assert api.get('/api/projects').status_code == 403


# === PROJECTS ===

def test_create_project_announces_globally(api, user, published):
    response = api.post('/api/projects', {'name': 'Launch'})

    assert response.status_code == 201
    body = response.json()
    assert body['name'] == 'Launch'
    assert body['ownerId'] == str(user.id)
    assert published == [('global', 'project_created', body)]


def test_create_project_requires_name(api, published):
    response = api.post('/api/projects', {'name': '  '})

    assert response.status_code == 400
    assert response.json() == {'message': 'Project name is required'}
    assert published == []


def test_list_projects_only_own(api, project, other_user):
    Project.objects.create(owner=other_user, name='Foreign')

    response = api.get('/api/projects')

    assert response.status_code == 200
    assert [item['id'] for item in response.json()] == [str(project.id)]


def test_get_foreign_project_is_403(other_api, project):
    assert other_api.get(f'/api/projects/{project.id}').status_code == 403


def test_get_unknown_project_is_404(api):
    assert api.get(f'/api/projects/{uuid.uuid4()}').status_code == 404


def test_update_project(api, project, published):
    response = api.patch(f'/api/projects/{project.id}', {'name': 'Renamed'})

    assert response.status_code == 200
    assert response.json()['name'] == 'Renamed'
    assert published[0][:2] == (str(project.id), 'project_updated')


def test_delete_project_cascades_and_is_idempotent(api, project, boards, tasks, published):
    first = api.delete(f'/api/projects/{project.id}')
    second = api.delete(f'/api/projects/{project.id}')

    assert first.status_code == 204
    assert second.status_code == 204
    assert not Board.objects.exists()
    assert not Task.objects.exists()
    for board in boards:
        assert api.get(f'/api/boards/{board.id}').status_code == 404
    for task in tasks:
        assert api.get(f'/api/tasks/{task.id}').status_code == 404
    assert [(scope, kind) for scope, kind, _ in published] == [
        (str(project.id), 'project_deleted'),
        ('global', 'project_deleted'),
    ]


def test_delete_foreign_project_is_403(other_api, project):
    assert other_api.delete(f'/api/projects/{project.id}').status_code == 403
    assert Project.objects.filter(pk=project.pk).exists()


def test_projects_method_not_allowed(api):
    assert api.put('/api/projects').status_code == 405


# === MONITORING ===

def test_health_check(anon_api, db):
    response = anon_api.get('/api/health')

    assert response.status_code == 200
    assert response.json()['status'] == 'healthy'


def test_project_events_on_global_scope_are_addressed_to_owner(api, user, monkeypatch):
    calls = []
    monkeypatch.setattr(
        'apps.core.views.fanout.publish',
        lambda scope, kind, data, audience=None: calls.append((str(scope), kind, str(audience)))
    )

    project_id = api.post('/api/projects', {'name': 'Private'}).json()['id']
    api.delete(f'/api/projects/{project_id}')

    global_calls = [call for call in calls if call[0] == 'global']
    assert global_calls == [
        ('global', 'project_created', str(user.id)),
        ('global', 'project_deleted', str(user.id)),
    ]
