"""Base domain exceptions."""

from typing import List


class DomainException(Exception):
    """
    Base exception for all domain-level errors.

    Domain exceptions represent business rule violations or
    domain-specific error conditions.
    """

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationException(DomainException):
    """
    Raised when caller input is malformed.

    ``field`` names the first violated field; ``errors`` lists every
    violation found so callers can surface them all at once.
    """

    def __init__(self, field: str, errors: List[str]):
        super().__init__(
            message="; ".join(errors),
            code="VALIDATION_ERROR",
        )
        self.field = field
        self.errors = errors
