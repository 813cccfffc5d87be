"""Exception hierarchy shared by the audit pipeline."""


class AuditError(Exception):
    """Base class for errors raised by audio_audit."""


class ConfigurationError(AuditError):
    """Required configuration is missing or invalid. Raised before any work starts."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid configuration")


class StorageError(AuditError):
    """A storage backend could not answer an existence probe."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: {type(cause).__name__}: {cause}")


class RecordSourceError(AuditError):
    """The record source failed while being read; the category run is aborted."""

    def __init__(self, category: str, cause: BaseException):
        self.category = category
        self.cause = cause
        super().__init__(
            f"record source for '{category}' failed: {type(cause).__name__}: {cause}"
        )
