"""Domain exceptions raised by services and mapped to HTTP errors by routers."""


class NotFoundError(ValueError):
    """Requested row does not exist (or is not visible to the caller)."""


class ConflictError(ValueError):
    """Write would violate a uniqueness rule (duplicate email, active pregnancy, ...)."""


class ForbiddenError(ValueError):
    """Row exists but belongs to another pregnancy/user."""


class InvalidInviteHash(ValueError):
    """Invite token is malformed or does not resolve to an active pregnancy."""


def status_code_for(exc: ValueError) -> int:
    """HTTP status for a service-layer error; plain ValueError means bad input."""
    if isinstance(exc, (NotFoundError, InvalidInviteHash)):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    if isinstance(exc, ForbiddenError):
        return 403
    return 400
