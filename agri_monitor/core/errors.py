"""
Agri Monitor - Error types

Every error carries the HTTP status it maps to at the API boundary,
where it is rendered as {"error": message}.
"""


class AgriMonitorError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(AgriMonitorError):
    """Missing, unknown or inactive credential."""

    status_code = 401


class Forbidden(AgriMonitorError):
    """Authenticated user acting outside their own community."""

    status_code = 403


class ValidationError(AgriMonitorError):

    """Request payload failed validation."""

    status_code = 400


class NotFound(AgriMonitorError):
    status_code = 404


class InternalError(AgriMonitorError):
    """Storage or unexpected failure."""

    status_code = 500


class UpstreamError(AgriMonitorError):
    """The hosted language model returned an error."""

    status_code = 500
