# apps/core/permissions.py

from functools import wraps

from .auth_service import auth_service
from .exceptions import PermissionDenied


class BoardPermissions:
    """
    Ownership rules for the project -> board -> task hierarchy

    A user can see and change everything under the projects they own.
    """

    @staticmethod
    def owns_project(user, project):
        return user is not None and project.owner_id == user.id

    @staticmethod
    def owns_board(user, board):
        return BoardPermissions.owns_project(user, board.project)

    @staticmethod
    def owns_task(user, task):
        return BoardPermissions.owns_board(user, task.board)

    @staticmethod
    def check_project(user, project):
        """Raise PermissionDenied unless the user owns the project"""
        if not BoardPermissions.owns_project(user, project):
            raise PermissionDenied()
        return project

    @staticmethod
    def check_board(user, board):
        if not BoardPermissions.owns_board(user, board):
            raise PermissionDenied()
        return board

    @staticmethod
    def check_task(user, task):
        if not BoardPermissions.owns_task(user, task):
            raise PermissionDenied()
        return task


# Decorators for views

def token_required(view_func):
    """
    Decorator that authenticates the bearer token

    The resolved user is attached as `request.api_user`. Must sit inside
    `api_endpoint` so the auth errors become 401/403 answers.
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        token = auth_service.token_from_header(request.headers.get('Authorization'))
        request.api_user = auth_service.verify_token(token)
        return view_func(request, *args, **kwargs)

    return wrapped_view
