# apps/core/api.py

import json
import logging
from functools import wraps

from django.http import HttpResponse, JsonResponse

from .exceptions import BoardError, InvalidInput

logger = logging.getLogger(__name__)


def api_endpoint(failure_message):
    """
    Decorator for JSON views

    Maps the error taxonomy to status codes. Anything else is logged
    with its traceback and answered with `failure_message` and a 500,
    so no internal detail leaves the server.
    """

    def decorator(view_func):
        @wraps(view_func)
        def wrapped_view(request, *args, **kwargs):
            try:
                return view_func(request, *args, **kwargs)
            except BoardError as e:
                if e.status_code >= 500:
                    cause = getattr(e, 'cause', None) or e
                    logger.error(
                        f"❌ {request.method} {request.path} failed: {e.message}",
                        exc_info=(type(cause), cause, cause.__traceback__)
                    )
                    return JsonResponse({'message': failure_message}, status=e.status_code)
                return JsonResponse({'message': e.message}, status=e.status_code)
            except Exception:
                logger.exception(f"❌ {request.method} {request.path} failed")
                return JsonResponse({'message': failure_message}, status=500)

        return wrapped_view

    return decorator


def parse_json_body(request):
    """Decode the request body as a JSON object"""
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidInput('Request body must be valid JSON')

    if not isinstance(data, dict):
        raise InvalidInput('Request body must be a JSON object')

    return data


def require_fields(data, *fields, message=None):
    """Raise InvalidInput unless every field is present and non-blank"""
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise InvalidInput(message or f'{field} is required')


def no_content():
    """Empty 204 answer for deletes"""
    return HttpResponse(status=204)
