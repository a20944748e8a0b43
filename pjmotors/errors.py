"""Domain errors raised by the record store and document policy.

Each carries the HTTP status the API answers with; the handlers in
``pjmotors.main`` do the mapping.
"""


class RecordError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(RecordError):
    status_code = 400


class NotFoundError(RecordError):
    status_code = 404


class ConflictError(RecordError):
    status_code = 409


class StorageError(RecordError):
    """Backing file missing or unwritable although metadata says otherwise."""

    status_code = 500
