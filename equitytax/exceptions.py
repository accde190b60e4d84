"""Custom exceptions for the equity tax estimator."""


class TaxComputationError(Exception):
    """Base exception for tax computation errors."""


class DataValidationError(TaxComputationError):
    """Raised when input data fails validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error on '{field}': {message}")


class ScheduleError(TaxComputationError):
    """Raised when a bracket table breaks the progressive schedule invariants."""

    def __init__(self, message: str):
        super().__init__(f"Invalid tax schedule: {message}")
