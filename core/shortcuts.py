from django.db.models import QuerySet

from .errors import NotFoundError
from .schemas import MAX_ID


def get_object(source, pk, message=None):
    """Fetch by primary key from a model or queryset, raising ``NotFoundError``."""
    queryset = source if isinstance(source, QuerySet) else source.objects.all()
    model = queryset.model
    message = message or f'{model._meta.verbose_name.capitalize()} not found'
    if isinstance(pk, int) and not 0 < pk <= MAX_ID:
        raise NotFoundError(message)
    try:
        return queryset.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(message)
