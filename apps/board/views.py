# apps/board/views.py

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_POST

from apps.core.api import api_endpoint, no_content, parse_json_body, require_fields
from apps.core.exceptions import NotFound
from apps.core.permissions import BoardPermissions, token_required

from .notifications import fanout
from .reorder import ReorderCoordinator
from .store import board_store, project_store, task_store

board_reorder = ReorderCoordinator(board_store)
task_reorder = ReorderCoordinator(task_store, reparent_key='boardId')


def _owned_project(request, project_id):
    return BoardPermissions.check_project(request.api_user, project_store.find_by_id(project_id))


def _owned_board(request, board_id):
    return BoardPermissions.check_board(request.api_user, board_store.find_by_id(board_id))


def _owned_task(request, task_id):
    return BoardPermissions.check_task(request.api_user, task_store.find_by_id(task_id))


# === BOARDS ===

@csrf_exempt
@require_http_methods(['GET', 'POST'])
def project_boards(request, project_id):
    """
    GET: boards of a project, `order` ascending
    POST: create a board at the end of the project
    """
    if request.method == 'POST':
        return create_board(request, project_id)
    return list_boards(request, project_id)


@api_endpoint('Failed to get boards')
@token_required
def list_boards(request, project_id):
    _owned_project(request, project_id)
    boards = board_store.find_children(project_id)
    return JsonResponse([board.to_dict() for board in boards], safe=False)


@api_endpoint('Failed to create board')
@token_required
def create_board(request, project_id):
    data = parse_json_body(request)
    require_fields(data, 'name', message='Board name is required')

    _owned_project(request, project_id)
    board = board_store.create(project_id, name=data['name'])

    fanout.publish(board.project_id, 'board_created', board.to_dict())
    return JsonResponse(board.to_dict(), status=201)


@csrf_exempt
@require_http_methods(['GET', 'PATCH', 'DELETE'])
def board_detail(request, board_id):
    if request.method == 'PATCH':
        return update_board(request, board_id)
    if request.method == 'DELETE':
        return delete_board(request, board_id)
    return get_board(request, board_id)


@api_endpoint('Failed to get board')
@token_required
def get_board(request, board_id):
    return JsonResponse(_owned_board(request, board_id).to_dict())


@api_endpoint('Failed to update board')
@token_required
def update_board(request, board_id):
    data = parse_json_body(request)
    require_fields(data, 'name', message='Board name is required')

    _owned_board(request, board_id)
    board = board_store.update(board_id, name=data['name'])

    fanout.publish(board.project_id, 'board_updated', board.to_dict())
    return JsonResponse(board.to_dict())


@api_endpoint('Failed to delete board')
@token_required
def delete_board(request, board_id):
    """Idempotent: an unknown board answers 204 as well"""
    try:
        _owned_board(request, board_id)
        snapshot = board_store.delete(board_id)
    except NotFound:
        return no_content()

    event = {'id': snapshot['id'], 'projectId': snapshot['projectId']}
    fanout.publish(snapshot['projectId'], 'board_deleted', event)
    # Subscribers of the board itself lose their tasks with it
    fanout.publish(snapshot['id'], 'board_deleted', event)
    return no_content()


@csrf_exempt
@require_POST
@api_endpoint('Failed to reorder boards')
@token_required
def reorder_boards(request):
    """
    Body: {projectId, orderedBoards: [{id}, ...]} in the desired order
    """
    data = parse_json_body(request)
    project_id = data.get('projectId')
    ordered = data.get('orderedBoards')

    board_reorder.validate(project_id, ordered)
    if ordered:
        _owned_project(request, project_id)

    user = request.api_user
    boards = board_reorder.reorder(
        project_id, ordered,
        authorize=lambda board: BoardPermissions.check_board(user, board)
    )
    return JsonResponse({
        'message': 'Boards reordered successfully',
        'boards': [board.to_dict() for board in boards],
    })


# === TASKS ===

@csrf_exempt
@require_http_methods(['GET', 'POST'])
def board_tasks(request, board_id):
    """
    GET: tasks of a board, `order` ascending
    POST: create a task at the end of the board
    """
    if request.method == 'POST':
        return create_task(request, board_id)
    return list_tasks(request, board_id)


@api_endpoint('Failed to get tasks')
@token_required
def list_tasks(request, board_id):
    _owned_board(request, board_id)
    tasks = task_store.find_children(board_id)
    return JsonResponse([task.to_dict() for task in tasks], safe=False)


@api_endpoint('Failed to create task')
@token_required
def create_task(request, board_id):
    data = parse_json_body(request)
    require_fields(data, 'title', message='Task title is required')

    _owned_board(request, board_id)
    task = task_store.create(
        board_id,
        title=data['title'],
        description=data.get('description'),
    )

    fanout.publish(task.board_id, 'task_created', task.to_dict())
    return JsonResponse(task.to_dict(), status=201)


@csrf_exempt
@require_http_methods(['GET', 'PATCH', 'DELETE'])
def task_detail(request, task_id):
    if request.method == 'PATCH':
        return update_task(request, task_id)
    if request.method == 'DELETE':
        return delete_task(request, task_id)
    return get_task(request, task_id)


@api_endpoint('Failed to get task')
@token_required
def get_task(request, task_id):
    return JsonResponse(_owned_task(request, task_id).to_dict())


@api_endpoint('Failed to update task')
@token_required
def update_task(request, task_id):
    data = parse_json_body(request)
    changes = {field: data[field] for field in ('title', 'description') if field in data}

    _owned_task(request, task_id)
    task = task_store.update(task_id, **changes)

    fanout.publish(task.board_id, 'task_updated', task.to_dict())
    return JsonResponse(task.to_dict())


@api_endpoint('Failed to delete task')
@token_required
def delete_task(request, task_id):
    """Idempotent: an unknown task answers 204 as well"""
    try:
        _owned_task(request, task_id)
        snapshot = task_store.delete(task_id)
    except NotFound:
        return no_content()

    fanout.publish(snapshot['boardId'], 'task_deleted', {
        'id': snapshot['id'],
        'boardId': snapshot['boardId'],
    })
    return no_content()


@csrf_exempt
@require_POST
@api_endpoint('Failed to reorder tasks')
@token_required
def reorder_tasks(request):
    """
    Body: {boardId, orderedTasks: [{id, boardId?}, ...]} in the desired order

    An element carrying `boardId` is moved to that board as part of the
    same transaction.
    """
    data = parse_json_body(request)
    board_id = data.get('boardId')
    ordered = data.get('orderedTasks')

    task_reorder.validate(board_id, ordered)
    if ordered:
        _owned_board(request, board_id)

    user = request.api_user
    tasks = task_reorder.reorder(
        board_id, ordered,
        authorize=lambda task: BoardPermissions.check_task(user, task)
    )
    return JsonResponse({
        'message': 'Tasks reordered successfully',
        'tasks': [task.to_dict() for task in tasks],
    })
