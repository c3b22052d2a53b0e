"""Shared test fixtures for the OHLCV sanitizer."""

from collections.abc import Callable

import pytest

from ohlcv_sanitizer.config import SanitizerSettings
from ohlcv_sanitizer.models import OHLCVRecord
from ohlcv_sanitizer.sanitizer import OHLCVSanitizer
from ohlcv_sanitizer.timeframe import Timeframe


@pytest.fixture
def make_candle() -> Callable[..., OHLCVRecord]:
    """Return a factory for valid candles with overridable fields."""

    def _make(
        open_time: int,
        open: str = "100.0",
        high: str = "101.0",
        low: str = "99.0",
        close: str = "100.5",
        volume: str = "1000",
    ) -> OHLCVRecord:
        return OHLCVRecord(
            open_time=open_time,
            open=open,
            high=high,
            low=low,
            close=close,
            volume=volume,
        )

    return _make


@pytest.fixture
def five_minute() -> Timeframe:
    return Timeframe.parse("5m")


@pytest.fixture
def sanitizer(five_minute: Timeframe) -> OHLCVSanitizer:
    """Return a fresh sanitizer on a 5-minute (300s) timeframe."""
    return OHLCVSanitizer(five_minute)


@pytest.fixture
def sanitizer_settings() -> SanitizerSettings:
    return SanitizerSettings(
        default_timeframe="1m",
        default_timezone="UTC",
        validate_batches=True,
    )
