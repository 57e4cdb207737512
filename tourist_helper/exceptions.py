"""Domain errors raised by the service layer.

Routers translate these into HTTP responses; services never import FastAPI.
"""


class TouristHelperError(Exception):
    """Base class for every domain error"""


class ValidationError(TouristHelperError, ValueError):
    """Request data is missing or inconsistent (400)"""


class InvalidTransitionError(ValidationError):
    """A status change is not allowed from the current status (400)"""


class NotFoundError(TouristHelperError, LookupError):
    """A referenced record does not exist (404)"""


class AuthenticationError(TouristHelperError):
    """Credentials or CAPTCHA could not be verified (400)"""


class PermissionDeniedError(TouristHelperError):
    """The caller may not perform this action (403)"""


class AccountBlockedError(PermissionDeniedError):
    """The account has been blocked by an admin (403)"""
