"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input rejected before any mutation took place"""

    pass


class InsufficientBalanceError(ValidationError):
    """Requested allocations exceed what the lump sum has left"""

    pass


class RecordNotFoundError(DomainException):
    """Referenced record, payment or allocation does not exist"""

    pass


class DuplicateOptionError(DomainException):
    """Saved option already exists"""

    def __init__(self, kind: str, value: str):
        super().__init__(f"{value} already exists in saved {kind}")
        self.kind = kind
        self.value = value


class ConcurrentUpdateError(DomainException):
    """Row changed underneath us since it was read"""

    pass


class StoreError(DomainException):
    """Record store failed for a reason other than a duplicate"""

    pass
