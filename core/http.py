import json
import logging
from functools import wraps

from django.db import DatabaseError
from django.http import JsonResponse

from .errors import StoreError, StorefrontError, ValidationError
from .schemas import MAX_ID

logger = logging.getLogger(__name__)


def json_view(view):
    """Render ``StorefrontError`` subclasses as JSON error responses.

    Database failures are logged and surfaced as a generic ``StoreError``.
    """

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except StorefrontError as e:
            return JsonResponse(e.as_dict(), status=e.status_code)
        except DatabaseError:
            logger.exception('Store failure in %s %s', request.method, request.path)
            error = StoreError()
            return JsonResponse(error.as_dict(), status=error.status_code)

    return wrapper


def read_json(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except json.JSONDecodeError:
        raise ValidationError('Invalid JSON')
    if not isinstance(data, dict):
        raise ValidationError('Expected a JSON object')
    return data


def parse_id(value):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return None
    return value if 0 < value <= MAX_ID else None
