"""
Error taxonomy for the community core.

- ValidationError: malformed input, raised before any store call
- PermissionDeniedError: the actor may not perform the operation
- NotFoundError: write path against a missing row
- ConflictError / DuplicateReportError: duplicate report, resolving a resolved report
- StoreError / DuplicateError / CascadeError: transport or backend failures

Every error carries a message key from murshid.i18n so the HTTP layer can
answer in the request language; str(error) is the English rendering used in logs.
"""


class CommunityError(Exception):
    status_code = 400
    error_code = 'community_error'
    message_key = 'http.400'

    def __init__(self, message_key=None, **params):
        self.message_key = message_key or self.message_key
        self.params = params
        super().__init__(self.render('en'))

    def render(self, language=None):
        from murshid.i18n import translate
        return translate(self.message_key, language, **self.params)

    def to_dict(self, language=None):
        return {
            'error': self.error_code,
            'message': self.render(language),
            'status': self.status_code,
        }


class ValidationError(CommunityError):
    status_code = 400
    error_code = 'validation_error'


class PermissionDeniedError(CommunityError):
    status_code = 403
    error_code = 'permission_denied'
    message_key = 'permission.not_owner'


class NotFoundError(CommunityError):
    status_code = 404
    error_code = 'not_found'
    message_key = 'not_found.resource'


class ConflictError(CommunityError):
    status_code = 409
    error_code = 'conflict'
    message_key = 'conflict.duplicate'


class DuplicateReportError(ConflictError):
    error_code = 'already_reported'
    message_key = 'conflict.already_reported'


class StoreError(CommunityError):
    status_code = 503
    error_code = 'store_error'
    message_key = 'store.unavailable'

    def __init__(self, message_key=None, detail=None, **params):
        self.detail = detail
        super().__init__(message_key, **params)


class DuplicateError(StoreError):
    """A uniqueness constraint rejected an insert or update."""
    status_code = 409
    error_code = 'duplicate'
    message_key = 'conflict.duplicate'


class CascadeError(StoreError):
    """A soft-delete cascade stopped part way; retrying the whole cascade is safe."""
    error_code = 'cascade_incomplete'
    message_key = 'store.cascade_incomplete'

    def __init__(self, root_type, root_id, failed_step, completed_steps, detail=None):
        self.root_type = root_type
        self.root_id = root_id
        self.failed_step = failed_step
        self.completed_steps = list(completed_steps)
        super().__init__(detail=detail)
