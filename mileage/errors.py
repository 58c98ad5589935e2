"""Exception types for the mileage tracker."""


class MileageError(Exception):
    """Base class for mileage tracker errors."""


class StorageError(MileageError):
    """Raised when the key-value backend cannot be read or written."""


class InvalidInputError(MileageError, ValueError):
    """Raised when user input is rejected before reaching the store or engine."""
