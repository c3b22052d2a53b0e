"""Per-stream sanitizer registry.

A dispatcher that receives candle batches for many (symbol, timeframe) streams
owns one SanitizerRegistry and routes every batch through it. Each stream gets
its own OHLCVSanitizer; no state is shared between streams.
"""

from collections.abc import Sequence

from ohlcv_sanitizer.config import SanitizerSettings
from ohlcv_sanitizer.exceptions import TimeframeFormatError
from ohlcv_sanitizer.logging import get_logger, stream_context
from ohlcv_sanitizer.models import OHLCVRecord
from ohlcv_sanitizer.sanitizer import OHLCVSanitizer
from ohlcv_sanitizer.timeframe import Timeframe

logger = get_logger(__name__)

StreamKey = tuple[str, Timeframe]


class SanitizerRegistry:
    """Maps stream identity ``(symbol, timeframe)`` to its sanitizer.

    Sanitizers are created lazily on first use. Timeframes may be passed as
    :class:`Timeframe` objects or in text form (``"5m"``); text without a
    zone suffix uses ``settings.default_timezone``.

    Args:
        settings: Sanitizer settings; defaults are loaded from the environment.

    Usage:
        registry = SanitizerRegistry()
        clean = registry.process("BTC/USDT", "1h", batch)
    """

    def __init__(self, settings: SanitizerSettings | None = None) -> None:
        self._settings = settings or SanitizerSettings()
        self._sanitizers: dict[StreamKey, OHLCVSanitizer] = {}

    def __len__(self) -> int:
        return len(self._sanitizers)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        symbol, timeframe = key
        try:
            return self._key(symbol, timeframe) in self._sanitizers
        except TimeframeFormatError:
            return False

    def get(self, symbol: str, timeframe: Timeframe | str | None = None) -> OHLCVSanitizer:
        """Return the sanitizer for a stream, creating it if needed."""
        key = self._key(symbol, timeframe)
        sanitizer = self._sanitizers.get(key)
        if sanitizer is None:
            sanitizer = OHLCVSanitizer(key[1])
            self._sanitizers[key] = sanitizer
            logger.debug("sanitizer_created", symbol=key[0], timeframe=str(key[1]))
        return sanitizer

    def process(
        self,
        symbol: str,
        timeframe: Timeframe | str | None,
        batch: Sequence[OHLCVRecord],
    ) -> list[OHLCVRecord]:
        """Validate (if enabled) and sanitize a batch for one stream.

        Raises:
            InvariantViolation: if validation is enabled and a record is invalid.
                The stream's state is left unchanged.
        """
        sanitizer = self.get(symbol, timeframe)
        with stream_context(symbol, sanitizer.timeframe):
            if self._settings.validate_batches:
                sanitizer.validate_batch(batch)
            return sanitizer.sanitize_batch(batch)

    def reset(self, symbol: str, timeframe: Timeframe | str | None = None) -> None:
        """Reset one stream's state if it exists."""
        sanitizer = self._sanitizers.get(self._key(symbol, timeframe))
        if sanitizer is not None:
            sanitizer.reset()

    def remove(self, symbol: str, timeframe: Timeframe | str | None = None) -> bool:
        """Drop a stream's sanitizer. Returns True if one was registered."""
        removed = self._sanitizers.pop(self._key(symbol, timeframe), None)
        if removed is not None:
            logger.debug("sanitizer_removed", symbol=symbol, timeframe=str(removed.timeframe))
        return removed is not None

    def reset_all(self) -> None:
        for sanitizer in self._sanitizers.values():
            sanitizer.reset()
        logger.info("sanitizers_reset", streams=len(self._sanitizers))

    def streams(self) -> list[StreamKey]:
        """Return the registered stream keys in creation order."""
        return list(self._sanitizers)

    def _key(self, symbol: str, timeframe: Timeframe | str | None) -> StreamKey:
        if timeframe is None:
            timeframe = self._settings.default_timeframe
        if isinstance(timeframe, str):
            timeframe = Timeframe.parse(timeframe, default_timezone=self._settings.default_timezone)
        return symbol, timeframe
