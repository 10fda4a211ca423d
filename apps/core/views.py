# apps/core/views.py

import logging

from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps import __version__
from apps.board.notifications import GLOBAL_SCOPE, fanout
from apps.board.store import project_store

from .api import api_endpoint, no_content, parse_json_body, require_fields
from .auth_service import auth_service
from .exceptions import NotFound
from .permissions import BoardPermissions, token_required

logger = logging.getLogger(__name__)


def index(request):
    return JsonResponse({'message': 'TaskFlow Board backend is running'})


# === AUTHENTICATION ===

@csrf_exempt
@require_POST
@api_endpoint('An error occurred during registration')
def register_view(request):
    """
    Create an account; the password never comes back, not even hashed
    """
    user = auth_service.register(parse_json_body(request))
    return JsonResponse(user.to_dict(), status=201)


@csrf_exempt
@require_POST
@api_endpoint('An error occurred during login')
def login_view(request):
    """
    Check credentials and hand out a bearer token

    Wrong email and wrong password get the same answer.
    """
    data = parse_json_body(request)
    user, token = auth_service.login(data.get('email'), data.get('password'))

    payload = user.to_dict()
    payload['token'] = token
    return JsonResponse(payload)


# === PROJECTS ===

@csrf_exempt
@require_http_methods(['GET', 'POST'])
def projects(request):
    """
    GET: projects owned by the caller, newest first
    POST: create a project
    """
    if request.method == 'POST':
        return create_project(request)
    return list_projects(request)


@api_endpoint('Failed to get projects')
@token_required
def list_projects(request):
    owned = project_store.find_by_owner(request.api_user)
    return JsonResponse([project.to_dict() for project in owned], safe=False)


@api_endpoint('Failed to create project')
@token_required
def create_project(request):
    data = parse_json_body(request)
    require_fields(data, 'name', message='Project name is required')

    project = project_store.create(request.api_user, name=data['name'])

    fanout.publish(GLOBAL_SCOPE, 'project_created', project.to_dict(), audience=project.owner_id)
    return JsonResponse(project.to_dict(), status=201)


@csrf_exempt
@require_http_methods(['GET', 'PATCH', 'DELETE'])
def project_detail(request, project_id):
    if request.method == 'PATCH':
        return update_project(request, project_id)
    if request.method == 'DELETE':
        return delete_project(request, project_id)
    return get_project(request, project_id)


def _owned_project(request, project_id):
    return BoardPermissions.check_project(request.api_user, project_store.find_by_id(project_id))


@api_endpoint('Failed to get project')
@token_required
def get_project(request, project_id):
    return JsonResponse(_owned_project(request, project_id).to_dict())


@api_endpoint('Failed to update project')
@token_required
def update_project(request, project_id):
    data = parse_json_body(request)
    require_fields(data, 'name', message='Project name is required')

    _owned_project(request, project_id)
    project = project_store.update(project_id, name=data['name'])

    fanout.publish(project.id, 'project_updated', project.to_dict())
    return JsonResponse(project.to_dict())


@api_endpoint('Failed to delete project')
@token_required
def delete_project(request, project_id):
    """
    Delete a project with all its boards and tasks

    Idempotent: an unknown project answers 204 as well.
    """
    try:
        _owned_project(request, project_id)
        snapshot = project_store.delete(project_id)
    except NotFound:
        return no_content()

    event = {'id': snapshot['id']}
    fanout.publish(snapshot['id'], 'project_deleted', event)
    fanout.publish(GLOBAL_SCOPE, 'project_deleted', event, audience=snapshot['ownerId'])
    return no_content()


# === MONITORING ===

@require_GET
def health_check(request):
    """
    Health check for monitoring
    """
    try:
        # Database round trip
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')

        cache.set('health_check', 'ok', 60)
        cache.get('health_check')

        return JsonResponse({
            'status': 'healthy',
            'database': 'ok',
            'cache': 'ok',
            'timestamp': timezone.now().isoformat(),
            'version': __version__,
        })

    except Exception:
        logger.exception("❌ Health check failed")
        return JsonResponse({
            'status': 'unhealthy',
            'timestamp': timezone.now().isoformat(),
            'version': __version__,
        }, status=500)
