"""Single-record OHLCV invariant validation.

Checks that a candle has a positive open time, that every price and volume
field parses to a finite Decimal, and that the OHLC prices are consistent:
high is the maximum and low the minimum of the four prices.

Validation is independent of any sanitizer state and is meant to run before a
batch's numeric fields are trusted.
"""

from collections.abc import Sequence
from decimal import Decimal, InvalidOperation

from ohlcv_sanitizer.exceptions import InvariantViolation
from ohlcv_sanitizer.logging import get_logger
from ohlcv_sanitizer.models import OHLCVRecord

logger = get_logger(__name__)


def _parse_decimal(raw: str, field: str) -> Decimal:
    try:
        value = Decimal(raw)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvariantViolation(f"invalid {field}: {raw!r}") from e
    if not value.is_finite():
        raise InvariantViolation(f"invalid {field}: {raw!r}")
    return value


def validate_record(record: OHLCVRecord) -> None:
    """Raise InvariantViolation if ``record`` breaks a candle invariant."""
    if record.open_time <= 0:
        raise InvariantViolation(f"invalid opentime: {record.open_time}")

    open_ = _parse_decimal(record.open, "open price")
    high = _parse_decimal(record.high, "high price")
    low = _parse_decimal(record.low, "low price")
    close = _parse_decimal(record.close, "close price")

    if high < low:
        raise InvariantViolation(
            f"high price cannot be less than low price (high={high}, low={low})"
        )
    if high < open_ or high < close:
        raise InvariantViolation(
            f"high price cannot be less than open or close "
            f"(high={high}, open={open_}, close={close})"
        )
    if low > open_ or low > close:
        raise InvariantViolation(
            f"low price cannot be greater than open or close "
            f"(low={low}, open={open_}, close={close})"
        )

    _parse_decimal(record.volume, "volume")


def validate_batch(batch: Sequence[OHLCVRecord]) -> None:
    """Validate every record in order.

    Raises:
        InvariantViolation: for the first invalid record, tagged with its
            batch index (``"invalid record at index 3: ..."``).
    """
    for i, record in enumerate(batch):
        try:
            validate_record(record)
        except InvariantViolation as e:
            logger.warning(
                "batch_validation_failed",
                index=i,
                open_time=record.open_time,
                reason=e.reason,
            )
            raise InvariantViolation(e.reason, index=i) from e
