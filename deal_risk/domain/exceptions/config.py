"""Risk configuration domain exceptions."""

from .base import DomainException, ValidationException


class RiskConfigValidationException(ValidationException):
    """Raised when a risk configuration input is malformed."""


class RiskConfigurationException(DomainException):
    """Raised when the active configuration cannot be used at compute time."""

    def __init__(self, message: str, team_id: str | None = None):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
        )
        self.team_id = team_id


class RiskConfigVersionConflictException(DomainException):
    """Raised when two saves race for the same config version of a team."""

    def __init__(self, team_id: str, version: int):
        super().__init__(
            message=f"Config version {version} already exists for team {team_id}",
            code="CONFIG_VERSION_CONFLICT",
        )
        self.team_id = team_id
        self.version = version
