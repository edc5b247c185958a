from functools import wraps

from .errors import NotAuthenticated, PermissionDenied


def is_admin(user):
    return bool(user and user.is_authenticated and user.is_staff)


def admin_required(view):
    """Gate for back-office endpoints. Apply inside ``json_view``."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            raise NotAuthenticated()
        if not is_admin(request.user):
            raise PermissionDenied()
        return view(request, *args, **kwargs)

    return wrapper
