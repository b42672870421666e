"""Error taxonomy shared by services and the HTTP layer.

Services raise these; ``forum.main`` renders them as ``{"detail": message}``
with the class' status code.
"""


class ForumError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(ForumError):
    status_code = 400
    default_message = "Bad request"


class InvalidToken(BadRequest):
    # Same message for unknown, used and expired reset tokens.
    default_message = "Invalid or expired token"


class Unauthenticated(ForumError):
    status_code = 401
    default_message = "Please log in"


class InvalidSessionToken(Unauthenticated):
    default_message = "Invalid or expired login"


class InvalidCredentials(Unauthenticated):
    default_message = "Wrong email or password"


class Forbidden(ForumError):
    status_code = 403
    default_message = "You are not authorized to perform this action"


class NotFound(ForumError):
    status_code = 404
    default_message = "Not found"


class Conflict(ForumError):
    status_code = 409
    default_message = "Conflict"


class Internal(ForumError):
    status_code = 500


class ServiceUnavailable(ForumError):
    status_code = 503
    default_message = "Service temporarily unavailable, please retry"


class NotificationError(Exception):
    """The notification could not be handed to the delivery queue."""
