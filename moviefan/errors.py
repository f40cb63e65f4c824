# moviefan/errors.py
# Exceptions shared by the catalog client, the store and the routes
# -----------------------------------------------------------------

class MovieFanError(Exception):
    """Base class for all application exceptions"""
    pass


class UpstreamUnavailable(MovieFanError):
    """Raised when the upstream movie catalog cannot be reached or parsed"""
    pass


class StoreUnavailable(MovieFanError):
    """Raised when a read or write against the relational store fails"""
    pass


class NotFound(MovieFanError):
    """Raised when a referenced movie, fan, critic or review id is unknown"""

    def __init__(self, message, code="not_found"):
        super().__init__(message)
        self.code = code


class BadRequest(MovieFanError):
    """Raised when a request body or parameter is missing or malformed"""
    pass


class Conflict(MovieFanError):
    """Raised when creating an entity whose unique username is already taken"""
    pass
