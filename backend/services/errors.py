"""
OGCS CRM - Error taxonomy

Services raise these; server.py renders them as {"message": ...}
with the matching HTTP status.
"""


class CRMError(Exception):
    """Base class for errors surfaced to the caller"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CRMError):
    """Missing field, malformed id/date, invalid enum or shape"""
    status_code = 400


class Unauthorized(CRMError):
    status_code = 401


class Forbidden(CRMError):
    status_code = 403


class NotFound(CRMError):
    """Record absent or not owned by the caller"""
    status_code = 404


class Conflict(CRMError):
    """Duplicate phone/email inside one owner's leads"""
    status_code = 409
