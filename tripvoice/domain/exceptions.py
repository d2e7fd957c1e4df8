"""Domain semantic exceptions."""


class DomainError(Exception):
    """Base domain exception."""


class InvalidDraft(DomainError):
    """Raised when a draft cannot be turned into a record (e.g. non-positive amount)."""


class RecordNotFound(DomainError):
    """Raised when a persisted record does not exist."""

    def __init__(self, table: str, record_id: str):
        self.table = table
        self.record_id = record_id
        super().__init__(f"{table} record not found: {record_id}")
