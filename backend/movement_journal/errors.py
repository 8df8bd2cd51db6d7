# Overview: Domain exceptions raised by the service layer and mapped to HTTP statuses by routes.

"""
Service-layer error types.

Routes catch these and translate them into {"success": false, "message": ...}
responses. Anything not listed here is treated as an internal failure (500).
"""


class ServiceError(Exception):
    """Base class for expected, caller-facing failures."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Missing or malformed input, including unique-constraint clashes."""
    status_code = 400


class BulkInputError(ValidationError):
    """Bulk endpoint received an empty or non-array id list."""
    pass


class LifecycleError(ValidationError):
    """Raised when an invalid movement state transition is attempted."""
    pass


class AuthorizationError(ServiceError):
    """The authenticated principal may not act on this resource."""
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ClaimConflictError(ServiceError):
    """Another supervisor claimed the movement first."""
    status_code = 409


def require_id_list(ids, label: str = "IDs") -> list[int]:
    """
    Validate a bulk id payload before touching the store.

    Raises BulkInputError for anything that is not a non-empty list of integers.
    """
    if not isinstance(ids, list) or not ids:
        raise BulkInputError(f"Invalid {label}")
    try:
        return [int(i) for i in ids]
    except (TypeError, ValueError):
        raise BulkInputError(f"Invalid {label}")
