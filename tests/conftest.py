from __future__ import annotations

from concurrent.futures import Future
from typing import List, Sequence

import pytest

from aurora_compass.compass_core.model import GeoPoint, Target

# ---------- Shared fixtures ----------


class RecordingResolver:
    """Resolver whose futures are completed by the test."""

    def __init__(self) -> None:
        self.calls: List[List[Target]] = []
        self.futures: List[Future] = []

    def resolve_names(self, points: Sequence[Target]) -> Future:
        fut: Future = Future()
        self.calls.append(list(points))
        self.futures.append(fut)
        return fut


@pytest.fixture
def resolver() -> RecordingResolver:
    return RecordingResolver()


@pytest.fixture
def tromso() -> GeoPoint:
    """Observer in Tromsø, a few meters above sea level."""
    return GeoPoint(69.6492, 18.9553, 10.0)


@pytest.fixture
def target_a() -> Target:
    return Target(id="A", latitude_deg=70.0, longitude_deg=20.0, probability=60.0)


@pytest.fixture
def target_b() -> Target:
    return Target(id="B", latitude_deg=72.0, longitude_deg=25.0, probability=40.0)

