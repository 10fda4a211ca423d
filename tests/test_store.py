import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

from apps.board import ordering
from apps.board.store import board_store, project_store, task_store
from apps.core.exceptions import InvalidInput, NotFound
from apps.core.models import Board, Project, Task


def test_create_appends_in_insertion_order(boards):
    assert [board.order for board in boards] == [0, 1, 2]


def test_create_strips_required_field(project):
    board = board_store.create(project.id, name='  Backlog  ')
    assert board.name == 'Backlog'


def test_create_requires_name(project):
    with pytest.raises(InvalidInput):
        board_store.create(project.id, name='   ')


def test_create_under_missing_parent(db):
    with pytest.raises(NotFound):
        task_store.create(uuid.uuid4(), title='Orphan')


def test_find_children_sorted_by_order(project, boards):
    Board.objects.filter(pk=boards[0].pk).update(order=9)

    children = board_store.find_children(project.id)

    assert [board.name for board in children] == ['Doing', 'Done', 'Todo']


def test_find_children_of_missing_parent(db):
    with pytest.raises(NotFound):
        board_store.find_children(uuid.uuid4())


@pytest.mark.parametrize('bad_id', ['not-a-uuid', '', str(uuid.uuid4())])
def test_find_by_id_missing(db, bad_id):
    with pytest.raises(NotFound):
        task_store.find_by_id(bad_id)


def test_update_changes_content_fields_only(tasks):
    task = task_store.update(tasks[0].id, title='Renamed', description='Notes', order=99)

    task.refresh_from_db()
    assert task.title == 'Renamed'
    assert task.description == 'Notes'
    assert task.order == 0


def test_update_cannot_blank_required_field(tasks):
    with pytest.raises(InvalidInput):
        task_store.update(tasks[0].id, title='')


def test_update_missing_entity(db):
    with pytest.raises(NotFound):
        board_store.update(uuid.uuid4(), name='Nope')


def test_delete_project_cascades(user, project, boards, tasks):
    other = project_store.create(user, name='Other')
    kept = board_store.create(other.id, name='Kept')

    snapshot = project_store.delete(project.id)

    assert snapshot['id'] == str(project.id)
    assert not Project.objects.filter(pk=project.pk).exists()
    assert not Board.objects.filter(project_id=project.id).exists()
    assert not Task.objects.filter(board_id__in=[board.id for board in boards]).exists()
    assert Board.objects.filter(pk=kept.pk).exists()


def test_delete_board_removes_its_tasks_and_leaves_gap(project, boards, tasks):
    board_store.delete(boards[0].id)

    assert Task.objects.count() == 0
    orders = ordering.siblings(Board, project.id).values_list('order', flat=True)
    assert sorted(orders) == [1, 2]


def test_delete_compacts_when_enabled(settings, project, boards):
    settings.BOARD_COMPACT_ON_DELETE = True

    board_store.delete(boards[0].id)

    orders = ordering.siblings(Board, project.id).values_list('order', flat=True)
    assert ordering.is_dense(orders)


def test_delete_missing_entity(db):
    with pytest.raises(NotFound):
        task_store.delete(uuid.uuid4())


def test_find_by_owner_newest_first(user, other_user):
    first = project_store.create(user, name='First')
    second = project_store.create(user, name='Second')
    project_store.create(other_user, name='Foreign')
    Project.objects.filter(pk=first.pk).update(created_at=timezone.now() - timedelta(days=1))

    owned = project_store.find_by_owner(user)

    assert [project.id for project in owned] == [second.id, first.id]


def test_create_rejects_overlong_title(boards):
    with pytest.raises(InvalidInput):
        task_store.create(boards[0].id, title='x' * 201)

    assert not Task.objects.exists()


def test_update_rejects_overlong_name(boards):
    with pytest.raises(InvalidInput):
        board_store.update(boards[0].id, name='x' * 201)


def test_project_name_length_limit(user):
    with pytest.raises(InvalidInput):
        project_store.create(user, name='x' * 201)

    assert project_store.create(user, name='x' * 200).name == 'x' * 200


def test_move_returns_previous_parent(boards, tasks):
    task, previous = task_store.move(tasks[1].id, 0, parent_id=str(boards[2].id))

    assert previous == boards[0].id
    assert task.board_id == boards[2].id
    assert task.order == 0
