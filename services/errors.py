class MedVerifyError(Exception):
    """Base error. Carries the HTTP status the API layer should answer with."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(MedVerifyError):
    """Malformed input, rejected before any lookup or computation."""

    status_code = 400


class NotFoundError(MedVerifyError):
    status_code = 404


class PermissionDeniedError(MedVerifyError):
    status_code = 403


class StorageError(MedVerifyError):
    """A read or write against the database failed."""

    status_code = 500


class ExternalServiceError(MedVerifyError):
    """The AI gateway failed. `status_code` keeps the upstream code (429, 402, ...)."""

    status_code = 502
