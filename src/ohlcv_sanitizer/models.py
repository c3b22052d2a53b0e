"""Data model for OHLCV candle records.

CRITICAL: Price and volume fields are decimal strings. Never convert them to
float inside the sanitizer; parsing happens only in the validator, via Decimal.
"""

from dataclasses import asdict, dataclass
from typing import Any

# Volume of synthesized gap candles. Downstream consumers expect this exact
# eight-decimal literal.
FILLER_VOLUME = "0.00000000"

_OPEN_TIME_KEYS = ("timestamp", "openTime", "open_time")


@dataclass(frozen=True)
class OHLCVRecord:
    """A single OHLCV candle.

    Attributes:
        open_time: Unix timestamp (seconds) marking the start of the candle period.
        open:      Opening price as a decimal string.
        high:      Highest price as a decimal string.
        low:       Lowest price as a decimal string.
        close:     Closing price as a decimal string.
        volume:    Traded volume as a decimal string.
    """

    open_time: int
    open: str
    high: str
    low: str
    close: str
    volume: str

    @classmethod
    def filler(cls, open_time: int, price: str) -> "OHLCVRecord":
        """Return a flat zero-volume candle carrying ``price`` forward."""
        return cls(
            open_time=open_time,
            open=price,
            high=price,
            low=price,
            close=price,
            volume=FILLER_VOLUME,
        )

    @classmethod
    def from_ccxt(cls, row: list) -> "OHLCVRecord":
        """Build a record from a ccxt kline row.

        Accepts ``[timestamp_ms, open, high, low, close, volume]``. The
        millisecond timestamp is floored to seconds.
        """
        return cls(
            open_time=int(row[0]) // 1000,
            open=str(row[1]),
            high=str(row[2]),
            low=str(row[3]),
            close=str(row[4]),
            volume=str(row[5]),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OHLCVRecord":
        """Build a record from a mapping.

        The open time may be given as ``timestamp``, ``openTime`` or
        ``open_time`` (seconds).
        """
        for key in _OPEN_TIME_KEYS:
            if key in data:
                open_time = int(data[key])
                break
        else:
            raise KeyError("record has no timestamp/openTime/open_time field")

        return cls(
            open_time=open_time,
            open=str(data["open"]),
            high=str(data["high"]),
            low=str(data["low"]),
            close=str(data["close"]),
            volume=str(data["volume"]),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the ``timestamp`` key of the plugin JSON record."""
        data = asdict(self)
        data["timestamp"] = data.pop("open_time")
        return data
