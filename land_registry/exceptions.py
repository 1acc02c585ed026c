"""Exception hierarchy for land administration operations."""


class LandAdminError(Exception):
    """Base exception for all land administration errors."""

    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class BadRequest(LandAdminError):
    """Raised when a state-machine precondition or data invariant is violated."""

    status_code = 400


class Forbidden(LandAdminError):
    """Raised when a role or ownership check fails."""

    status_code = 403


class NotFound(LandAdminError):
    """Raised when a referenced entity does not exist."""

    status_code = 404


class Conflict(LandAdminError):
    """Raised when a unique business key is already taken."""

    status_code = 409
