from django.http import JsonResponse
from django.middleware.csrf import get_token
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_http_methods


@require_http_methods(["GET"])
@ensure_csrf_cookie
def csrf_token(request):
    """Hand the back-office front end the token it echoes in ``X-CSRFToken``."""
    return JsonResponse({'csrf_token': get_token(request)})
