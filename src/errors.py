"""Exceptions raised by the store and the availability services."""


class AvailabilityError(Exception):
    """Base class for collaborator-layer failures."""


class EngineerNotFoundError(AvailabilityError):
    """Raised when a name or id matches no known engineer."""


class RuleNotFoundError(AvailabilityError):
    """Raised when deleting a rule id the store does not hold."""


class RuleValidationError(AvailabilityError):
    """Raised when a write request is missing the fields its rule type needs."""
