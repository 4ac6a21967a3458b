"""Typed domain errors raised by the service layer.

Services raise these instead of returning defaults or swallowing failures;
``main.py`` turns them into JSON responses carrying ``detail`` and ``error_code``.
"""


class DomainError(Exception):
    status_code = 400
    error_code = "domain_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(DomainError):
    status_code = 404
    error_code = "not_found"


class PermissionDeniedError(DomainError):
    status_code = 403
    error_code = "permission_denied"


class InvalidArgumentError(DomainError):
    status_code = 400
    error_code = "invalid_argument"


class InvalidTransitionError(DomainError):
    status_code = 409
    error_code = "invalid_transition"


class ConcurrencyConflictError(DomainError):
    status_code = 409
    error_code = "concurrency_conflict"
