"""Error taxonomy shared by every app.

Views never build error responses by hand: they raise one of these and
``core.http.json_view`` turns it into a JSON body with the matching status.
"""


class StorefrontError(Exception):
    status_code = 500
    default_message = 'Something went wrong'

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def as_dict(self):
        body = {'error': self.message}
        body.update(self.extra)
        return body


class ValidationError(StorefrontError):
    """Missing or malformed input. Never reaches the store."""

    status_code = 400
    default_message = 'Invalid input'

    def __init__(self, message=None, errors=None):
        super().__init__(message, errors=errors or {})

    @property
    def errors(self):
        return self.extra['errors']


class DuplicateError(StorefrontError):
    status_code = 409
    default_message = 'Already exists'


class NotFoundError(StorefrontError):
    status_code = 404
    default_message = 'Not found'


class PermissionDenied(StorefrontError):
    status_code = 403
    default_message = 'Admin access required'


class NotAuthenticated(PermissionDenied):
    status_code = 401
    default_message = 'Authentication required'


class StoreError(StorefrontError):
    """Opaque storage failure; the message shown to users is always generic."""

    status_code = 500
    default_message = 'Something went wrong, please try again'
