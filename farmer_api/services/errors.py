"""Error kinds raised by the service layer and mapped to HTTP statuses by the app."""


class ServiceError(Exception):
    """Base class for errors surfaced verbatim to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConflictError(ServiceError):
    status_code = 409


class UnauthorizedError(ServiceError):
    status_code = 401


class BadRequestError(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404
