"""Errors raised by the analysis core."""


class InputValidationError(ValueError):
    """Malformed or impossible input (empty series, bad timestamps, non-positive body weight...)."""
