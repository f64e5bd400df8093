"""Deal data domain exceptions."""

from .base import DomainException


class DealDataAccessException(DomainException):
    """Raised when the deal data collaborator fails or returns bad data."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(
            message=message,
            code="DATA_ACCESS_ERROR",
        )
        self.status_code = status_code


class DealDataTimeoutException(DealDataAccessException):
    """Raised when the deal data collaborator times out."""

    def __init__(self):
        super().__init__(
            message="Deal data request timed out",
            status_code=None,
        )
        self.code = "DATA_ACCESS_TIMEOUT"


class DealNotFoundException(DomainException):
    """Raised when a deal does not exist for the given team."""

    def __init__(self, deal_id: str, team_id: str):
        super().__init__(
            message=f"Deal not found: {deal_id}",
            code="DEAL_NOT_FOUND",
        )
        self.deal_id = deal_id
        self.team_id = team_id
