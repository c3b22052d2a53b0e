"""Incremental OHLCV batch sanitizer with duplicate removal and gap filling.

One OHLCVSanitizer is bound to a single (instrument, timeframe) stream and is
fed successive batches from a paginated fetch or a live feed. It only remembers
the first and last candle it has emitted, i.e. the interval of time already
seen, and uses that to:

- drop candles whose open time was already emitted (overlapping pages),
- synthesize flat zero-volume candles for boundaries skipped between the
  previous batch and the next one (forward only),
- keep track of both ends so that backward pagination can extend the start.

The sanitizer never parses prices. Run validate_batch() first when the
numeric content of a batch needs to be trusted.

Instances are not thread safe; calls for one stream must be strictly ordered.
"""

from collections.abc import Sequence
from dataclasses import replace

from ohlcv_sanitizer.logging import get_logger
from ohlcv_sanitizer.models import OHLCVRecord
from ohlcv_sanitizer.timeframe import Timeframe
from ohlcv_sanitizer.validator import validate_batch

logger = get_logger(__name__)


class OHLCVSanitizer:
    """Turns overlapping or gapped candle batches into a clean forward stream.

    Args:
        timeframe: Candle timeframe of the stream; sets the gap-fill step.

    Usage:
        sanitizer = OHLCVSanitizer(Timeframe.parse("5m"))
        for page in pages:
            store.append(sanitizer.sanitize_batch(page))
    """

    def __init__(self, timeframe: Timeframe) -> None:
        self._timeframe = timeframe
        self._first_candle: OHLCVRecord | None = None
        self._last_candle: OHLCVRecord | None = None
        self._initialized = False

    @property
    def timeframe(self) -> Timeframe:
        return self._timeframe

    @property
    def initialized(self) -> bool:
        """True once at least one non-empty batch produced output."""
        return self._initialized

    # ──────────────────────────────────────────────
    # Public methods
    # ──────────────────────────────────────────────

    def sanitize_batch(self, batch: Sequence[OHLCVRecord]) -> list[OHLCVRecord]:
        """Return this batch's new candles, deduplicated and gap-filled.

        The batch is sorted by open time (stably) on a copy. A candle is
        dropped when it repeats the previous candle's open time within the
        batch, or when its open time lies inside the already-seen interval
        ``[first.open_time, last.open_time]``.

        Before the first retained candle, if it extends the series forward,
        filler candles are inserted at every period boundary after the last
        seen candle. Fillers carry the last close as all four prices with
        zero volume. Batches older than the first seen candle are never
        gap-filled.

        Only candles produced by this call are returned, never the
        accumulated history.

        Raises:
            TimeframeFormatError: propagated from period computation for a
                malformed timeframe.
        """
        if not batch:
            return []

        ordered = sorted(batch, key=lambda c: c.open_time)
        step = self._timeframe.period_minutes() * 60

        result: list[OHLCVRecord] = []
        filled = 0
        skipped = 0
        gap_after: int | None = None
        previous_time: int | None = None

        for candle in ordered:
            is_internal_duplicate = previous_time is not None and candle.open_time == previous_time
            previous_time = candle.open_time

            if is_internal_duplicate or self._already_seen(candle.open_time):
                skipped += 1
                continue

            if not result and self._last_candle is not None and candle.open_time > self._last_candle.open_time:
                gap_after = self._last_candle.open_time
                fillers = self._gap_fillers(self._last_candle, candle.open_time, step)
                filled = len(fillers)
                result.extend(fillers)

            result.append(candle)

        if not result:
            logger.debug(
                "batch_fully_duplicate",
                timeframe=str(self._timeframe),
                received=len(batch),
            )
            return []

        self._update_bounds(result[0], result[-1])

        if filled:
            logger.info(
                "gap_filled",
                timeframe=str(self._timeframe),
                after=gap_after,
                before=result[filled].open_time,
                filler_candles=filled,
            )
        logger.debug(
            "batch_sanitized",
            timeframe=str(self._timeframe),
            received=len(batch),
            skipped=skipped,
            filled=filled,
            emitted=len(result),
        )
        return result

    def reset(self) -> None:
        """Forget the seen interval; the next batch is treated as the first."""
        self._first_candle = None
        self._last_candle = None
        self._initialized = False
        logger.debug("sanitizer_reset", timeframe=str(self._timeframe))

    def set_timeframe(self, timeframe: Timeframe) -> None:
        """Switch timeframe. Resets state, since prior gap math no longer applies."""
        self._timeframe = timeframe
        self.reset()

    def get_last_candle(self) -> OHLCVRecord | None:
        """Return a copy of the latest candle emitted so far, or None."""
        if self._last_candle is None:
            return None
        return replace(self._last_candle)

    def get_first_candle(self) -> OHLCVRecord | None:
        """Return a copy of the earliest candle emitted so far, or None."""
        if self._first_candle is None:
            return None
        return replace(self._first_candle)

    def validate_batch(self, batch: Sequence[OHLCVRecord]) -> None:
        """Check every record's invariants; see :func:`validator.validate_batch`."""
        validate_batch(batch)

    # ──────────────────────────────────────────────
    # Internal helpers
    # ──────────────────────────────────────────────

    def _already_seen(self, open_time: int) -> bool:
        if not self._initialized or self._first_candle is None or self._last_candle is None:
            return False
        return self._first_candle.open_time <= open_time <= self._last_candle.open_time

    @staticmethod
    def _gap_fillers(last: OHLCVRecord, until: int, step: int) -> list[OHLCVRecord]:
        fillers = []
        next_time = last.open_time + step
        while next_time < until:
            fillers.append(OHLCVRecord.filler(next_time, last.close))
            next_time += step
        return fillers

    def _update_bounds(self, first: OHLCVRecord, last: OHLCVRecord) -> None:
        if self._first_candle is None or first.open_time < self._first_candle.open_time:
            self._first_candle = replace(first)
        if self._last_candle is None or last.open_time > self._last_candle.open_time:
            self._last_candle = replace(last)
        self._initialized = True
