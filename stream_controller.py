"""
Owns the live dashboard state and the tick schedule that feeds it.

There is no background thread: the UI calls `pump(now_ms)` on every rerun and
the controller runs whichever ticks fell due since the last call. Stopping the
stream cancels the schedule's token, so later pumps find nothing to run.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import dashboard_config as cfg
from metrics_stream import (
    MetricsCounters,
    Sample,
    SampleGenerator,
    StreamBuffer,
    Timeframe,
)

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class TickSchedule:
    """A cancellable repeating task: next due time plus a cancellation flag."""

    period_ms: int
    next_due_ms: int
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    def due(self, now: int) -> bool:
        return not self.cancelled and self.next_due_ms <= now


class StreamController:
    """Live dashboard state: generator, buffer, KPI counters and the tick schedule.

    Single-threaded; every mutation happens inside `tick`, called from `pump`.
    """

    def __init__(
        self,
        generator: SampleGenerator,
        buffer: StreamBuffer,
        counters: Optional[MetricsCounters] = None,
        tick_ms: int = cfg.TICK_MS,
        max_catchup: int = cfg.MAX_CATCHUP_TICKS,
    ):
        if tick_ms <= 0:
            raise ValueError(f"tick_ms must be positive, got {tick_ms}")
        self.generator = generator
        self.buffer = buffer
        self.counters = counters if counters is not None else MetricsCounters.initial()
        self.tick_ms = tick_ms
        self.max_catchup = max(1, max_catchup)
        self._schedule: TickSchedule | None = None
        self.ticks = 0

    @classmethod
    def create(
        cls,
        now: Optional[int] = None,
        seed: Optional[int] = cfg.RANDOM_SEED,
        capacity: int = cfg.BUFFER_CAPACITY,
        backfill: bool = True,
        **kwargs,
    ) -> "StreamController":
        """Controller with a seeded random source and (optionally) seeded history."""
        generator = SampleGenerator(random.Random(seed))
        buffer = StreamBuffer(capacity)
        if backfill:
            buffer.backfill(generator, now if now is not None else now_ms())
        logger.debug("Stream buffer seeded with %d samples", len(buffer))
        return cls(generator, buffer, **kwargs)

    # ----------------------------- Control ----------------------------- #

    @property
    def is_streaming(self) -> bool:
        return self._schedule is not None and not self._schedule.cancelled

    def start(self, now: Optional[int] = None) -> None:
        if self.is_streaming:
            return
        now = now if now is not None else now_ms()
        self._schedule = TickSchedule(period_ms=self.tick_ms, next_due_ms=now + self.tick_ms)
        logger.info("Streaming started (tick every %d ms)", self.tick_ms)

    def stop(self) -> None:
        schedule, self._schedule = self._schedule, None
        if schedule is None:
            return
        schedule.cancel()
        logger.info("Streaming stopped after %d ticks", self.ticks)

    def tick(self, now: int) -> Sample:
        """Generate one sample, append it and advance the counters."""
        sample = self.generator.generate(now)
        counters = self.counters.advance(sample, self.generator.rng)
        self.buffer.append(sample)
        self.counters = counters
        self.ticks += 1
        return sample

    def pump(self, now: Optional[int] = None) -> int:
        """Run every tick that fell due up to `now`; returns how many ran."""
        schedule = self._schedule
        if schedule is None:
            return 0
        now = now if now is not None else now_ms()
        ran = 0
        while schedule.due(now) and ran < self.max_catchup:
            self.tick(schedule.next_due_ms)
            schedule.next_due_ms += schedule.period_ms
            ran += 1
        if schedule.due(now):
            skipped = (now - schedule.next_due_ms) // schedule.period_ms + 1
            logger.warning("Stream fell behind; skipping %d overdue ticks", skipped)
            schedule.next_due_ms = now + schedule.period_ms
        return ran

    # ----------------------------- Reads ----------------------------- #

    def current_window(self, timeframe: Timeframe | str) -> Tuple[Sample, ...]:
        return self.buffer.window(Timeframe.parse(timeframe).count)

    def current_metrics(self) -> MetricsCounters:
        return self.counters

    def buffer_length(self) -> int:
        return len(self.buffer)

    def reset(self, now: Optional[int] = None) -> None:
        """Stop streaming and reseed history and counters."""
        self.stop()
        self.buffer.clear()
        self.buffer.backfill(self.generator, now if now is not None else now_ms())
        self.counters = MetricsCounters.initial()
        self.ticks = 0
        logger.info("Stream reset")
