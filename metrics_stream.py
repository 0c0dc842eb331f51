"""
Synthetic metric samples and the bounded stream buffer behind the dashboard.

- SampleGenerator: one sample per call, sinusoidally modulated by the caller's clock
- StreamBuffer: fixed-capacity history, oldest sample evicted first
- MetricsCounters: running KPI counters nudged by small random deltas each tick

Randomness is always passed in as a `random.Random` so output is reproducible.
"""
from __future__ import annotations

import math
import random
from collections import deque
from dataclasses import asdict, dataclass, replace
from enum import Enum
from itertools import islice
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import pandas as pd

import dashboard_config as cfg

METRIC_FIELDS: Tuple[str, ...] = (
    "users",
    "revenue",
    "connections",
    "throughput",
    "errors",
    "response_time",
)

FRAME_COLUMNS: List[str] = ["timestamp", "time", *METRIC_FIELDS]


def check_metric_field(field: str) -> str:
    if field not in METRIC_FIELDS:
        raise ValueError(f"unknown metric field {field!r}; expected one of {', '.join(METRIC_FIELDS)}")
    return field


# ----------------------------- Samples ----------------------------- #

@dataclass(frozen=True)
class Sample:
    """One synthetic observation.

    Attributes:
        timestamp: Milliseconds since epoch.
        users, connections, throughput, errors: Non-negative counts.
        revenue, response_time: Non-negative amounts (currency, milliseconds).
    """

    timestamp: int
    users: int
    revenue: float
    connections: int
    throughput: int
    errors: int
    response_time: float

    def as_dict(self) -> Dict[str, Any]:
        row = asdict(self)
        row["responseTime"] = row.pop("response_time")
        return row


class Timeframe(Enum):
    ONE_HOUR = "1h"
    SIX_HOURS = "6h"
    DAY = "24h"

    @property
    def count(self) -> int:
        """Number of samples shown for this timeframe (one per minute)."""
        return cfg.TIMEFRAMES[self.value]

    @classmethod
    def parse(cls, value: "Timeframe | str") -> "Timeframe":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            labels = ", ".join(t.value for t in cls)
            raise ValueError(f"unknown timeframe {value!r}; expected one of {labels}") from None


# ----------------------------- Generator ----------------------------- #

class SampleGenerator:
    """Builds samples from a caller-supplied timestamp and an injected random source.

    The sine/cosine terms only make the series look trend-like; their periods
    (5 to 15 seconds) carry no meaning.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()

    def generate(self, t: int, modulated: bool = True) -> Sample:
        r = self.rng

        def wave(fn, period: float, amplitude: float) -> float:
            return amplitude * fn(t / period) if modulated else 0.0

        users = r.randrange(500, 1500) + wave(math.sin, 10000, 200)
        revenue = r.uniform(1000, 6000) + wave(math.cos, 15000, 1000)
        connections = r.randrange(100, 300) + wave(math.sin, 8000, 50)
        throughput = r.randrange(500, 1500) + wave(math.cos, 12000, 300)
        errors = r.randrange(0, 10)
        response_time = r.uniform(50, 250) + wave(math.sin, 5000, 30)

        return Sample(
            timestamp=int(t),
            users=int(round(users)),
            revenue=max(0.0, revenue),
            connections=int(round(connections)),
            throughput=int(round(throughput)),
            errors=errors,
            response_time=response_time,
        )


# ----------------------------- Buffer ----------------------------- #

class StreamBuffer:
    """Chronological sample history capped at `capacity` entries.

    Appending to a full buffer drops the oldest sample. Views returned by
    `window` are tuples, so callers cannot mutate the history through them.
    """

    def __init__(self, capacity: int = cfg.BUFFER_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._samples: deque[Sample] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen  # type: ignore[return-value]

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

    @property
    def latest(self) -> Optional[Sample]:
        return self._samples[-1] if self._samples else None

    def append(self, sample: Sample) -> None:
        self._samples.append(sample)

    def extend(self, samples: Iterable[Sample]) -> None:
        self._samples.extend(samples)

    def clear(self) -> None:
        self._samples.clear()

    def window(self, count: int) -> Tuple[Sample, ...]:
        """Return the last `min(count, len(self))` samples, oldest first."""
        if count <= 0:
            return ()
        if count >= len(self._samples):
            return tuple(self._samples)
        tail = list(islice(reversed(self._samples), count))
        tail.reverse()
        return tuple(tail)

    def backfill(
        self,
        generator: SampleGenerator,
        now_ms: int,
        count: Optional[int] = None,
        spacing_ms: int = cfg.BACKFILL_SPACING_MS,
    ) -> None:
        """Seed history with `count` unmodulated samples spaced `spacing_ms` apart.

        The newest seeded sample sits one spacing before `now_ms`.
        """
        n = self.capacity if count is None else count
        self.extend(
            generator.generate(now_ms - (n - i) * spacing_ms, modulated=False)
            for i in range(n)
        )


# ----------------------------- Projections ----------------------------- #

def metric_series(samples: Iterable[Sample], field: str) -> List[float]:
    """Project one numeric field out of `samples`, order preserved."""
    check_metric_field(field)
    return [getattr(s, field) for s in samples]


def to_frame(samples: Sequence[Sample]) -> pd.DataFrame:
    """Tabular view of `samples` with a datetime `time` column for charting."""
    if not samples:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    df = pd.DataFrame([asdict(s) for s in samples])
    df.insert(1, "time", pd.to_datetime(df["timestamp"], unit="ms"))
    return df[FRAME_COLUMNS]


# ----------------------------- Counters ----------------------------- #

@dataclass(frozen=True)
class MetricsCounters:
    """KPI counters shown above the charts; drift independently of the buffer."""

    total_users: int
    revenue: float
    active_connections: int
    throughput: int

    @classmethod
    def initial(cls) -> "MetricsCounters":
        seed = cfg.INITIAL_COUNTERS
        return cls(
            total_users=int(seed["totalUsers"]),
            revenue=float(seed["revenue"]),
            active_connections=int(seed["activeConnections"]),
            throughput=int(seed["throughput"]),
        )

    def advance(self, latest: Sample, rng: random.Random) -> "MetricsCounters":
        return replace(
            self,
            total_users=self.total_users + rng.randrange(-5, 5),
            revenue=self.revenue + rng.uniform(-50, 50),
            active_connections=latest.connections,
            throughput=latest.throughput,
        )
