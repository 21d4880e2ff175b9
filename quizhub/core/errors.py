"""
Domain errors raised by the quiz services.

Each error carries a human-readable message and the HTTP status code the API
layer answers with.
"""


class QuizHubError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(QuizHubError):
    """Malformed or missing input."""
    status_code = 400


class AuthenticationError(QuizHubError):
    """No caller identity was forwarded by the auth gateway."""
    status_code = 401


class NotFoundError(QuizHubError):
    status_code = 404


class ConflictError(QuizHubError):
    """Policy violation: duplicate save, self-rating, rating a private quiz."""
    status_code = 409


class UpstreamError(QuizHubError):
    """The generation service failed or returned text that could not be parsed."""
    status_code = 500


class InternalError(QuizHubError):
    status_code = 500
