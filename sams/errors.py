# sams/errors.py


class SamsError(Exception):
    """Base class for domain errors; rendered as ``{success: false, message}``."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SamsError):
    status_code = 400


class PermissionDeniedError(SamsError):
    status_code = 403


class NotFoundError(SamsError):
    status_code = 404


class ConflictError(SamsError):
    status_code = 409
