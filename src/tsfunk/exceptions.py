"""Custom exceptions and warnings for tsfunk."""


class TsFunkError(Exception):
    """Base exception for tsfunk errors."""


class ValidationError(TsFunkError):
    """Raised when an input table or operator argument is invalid."""


class ConfigurationError(TsFunkError):
    """Raised when a setting has an invalid value."""


class ShapeMismatchError(TsFunkError):
    """Raised when a matrix does not align with the rows/columns it labels."""

    def __init__(self, expected: tuple[int, int], actual: tuple[int, ...]) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Shape mismatch: expected {expected}, got {actual}")


class EmptyRowError(TsFunkError):
    """Raised when a mean is requested over a row or column with no valid values."""

    def __init__(self, axis: str, label: object) -> None:
        self.axis = axis
        self.label = label
        super().__init__(f"No valid values in {axis}: {label}")


class DegenerateRowWarning(UserWarning):
    """Emitted when a row holds a single valid value and its percentile rank is NaN."""
