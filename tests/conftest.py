"""Shared test fixtures for all test modules."""

import random

import pytest

from metrics_stream import Sample, SampleGenerator, StreamBuffer
from stream_controller import StreamController

# Fixed wall clock for the simulated-time tests (2024-01-01T00:00:00Z)
T0 = 1_704_067_200_000


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so generated values are reproducible."""
    return random.Random(1234)


@pytest.fixture
def generator(rng: random.Random) -> SampleGenerator:
    return SampleGenerator(rng)


@pytest.fixture
def make_sample():
    """Factory fixture for hand-built samples with distinct timestamps."""

    def _sample(timestamp: int, **overrides) -> Sample:
        values = dict(
            timestamp=timestamp,
            users=1000,
            revenue=2500.0,
            connections=200,
            throughput=900,
            errors=0,
            response_time=120.0,
        )
        values.update(overrides)
        return Sample(**values)

    return _sample


@pytest.fixture
def filled_buffer(make_sample) -> StreamBuffer:
    """Full buffer of 1000 samples with timestamps 0..999."""
    buffer = StreamBuffer(1000)
    for i in range(1000):
        buffer.append(make_sample(i))
    return buffer


@pytest.fixture
def controller(generator: SampleGenerator) -> StreamController:
    """Controller over an empty buffer so every tick is observable in its length."""
    return StreamController(generator, StreamBuffer(1000), tick_ms=1000, max_catchup=60)
