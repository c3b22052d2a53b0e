"""ohlcv-sanitizer: incremental deduplication and gap filling of OHLCV candle batches."""

from ohlcv_sanitizer.exceptions import InvariantViolation, SanitizerError, TimeframeFormatError
from ohlcv_sanitizer.models import FILLER_VOLUME, OHLCVRecord
from ohlcv_sanitizer.registry import SanitizerRegistry
from ohlcv_sanitizer.sanitizer import OHLCVSanitizer
from ohlcv_sanitizer.timeframe import COMMON_TIMEFRAMES, Timeframe, TimeUnit, parse
from ohlcv_sanitizer.validator import validate_batch, validate_record

__all__ = [
    "COMMON_TIMEFRAMES",
    "FILLER_VOLUME",
    "InvariantViolation",
    "OHLCVRecord",
    "OHLCVSanitizer",
    "SanitizerError",
    "SanitizerRegistry",
    "TimeUnit",
    "Timeframe",
    "TimeframeFormatError",
    "parse",
    "validate_batch",
    "validate_record",
]
__version__ = "0.1.0"
