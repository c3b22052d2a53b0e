"""Custom exceptions for the OHLCV sanitizer.

All timeframe and candle validation errors live here so that callers can
catch a single base class.
"""


class SanitizerError(Exception):
    """Base exception for all sanitizer errors."""


class TimeframeFormatError(SanitizerError, ValueError):
    """Raised for malformed timeframe text, unknown units or unknown timezones."""


class InvariantViolation(SanitizerError, ValueError):
    """Raised when a candle breaks a single-record invariant.

    When raised from batch validation, ``index`` holds the position of the
    offending record in the batch and the message is prefixed accordingly.
    """

    def __init__(self, reason: str, index: int | None = None) -> None:
        self.reason = reason
        self.index = index
        if index is None:
            super().__init__(reason)
        else:
            super().__init__(f"invalid record at index {index}: {reason}")
