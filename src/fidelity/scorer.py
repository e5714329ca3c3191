"""
Performance Scorer.

Converts a DeviceCapabilities snapshot into a single 0-100 score. The score
is the sum of independently capped contributions:

    CPU cores            max 25
    Screen pixels        max 20
    Graphics accel.      max 25
    Connection class     max 20
    Memory hint          max 10

Missing signals contribute a neutral value instead of zero so that a device
that simply does not expose an API is not punished for it.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from loguru import logger

from src.fidelity.models import DeviceCapabilities, EffectiveConnectionType

SCORE_MIN = 0
SCORE_MAX = 100

WEIGHTS = {
    "cpu_per_core": 4,
    "cpu_cap": 25,
    "graphics": 25,
    "memory_cap": 10,
    "memory_neutral": 5,
    "connection_neutral": 10,
}

# (pixel count lower bound, points), checked top-down, strict greater-than
SCREEN_BUCKETS = (
    (4_000_000, 20),
    (2_000_000, 15),
    (1_000_000, 10),
)
SCREEN_FLOOR = 5

CONNECTION_POINTS = {
    EffectiveConnectionType.G4: 20,
    EffectiveConnectionType.G3: 15,
    EffectiveConnectionType.G2: 5,
    EffectiveConnectionType.SLOW_2G: 5,
}


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-signal contributions behind a performance score."""
    cpu: int
    screen: int
    graphics: int
    connection: int
    memory: float

    @property
    def total(self) -> int:
        raw = self.cpu + self.screen + self.graphics + self.connection + self.memory
        # Halves round up, so 50.5 clears a "> 50" threshold
        return int(max(SCORE_MIN, min(SCORE_MAX, math.floor(raw + 0.5))))

    def to_dict(self) -> dict:
        return {
            "cpu": self.cpu,
            "screen": self.screen,
            "graphics": self.graphics,
            "connection": self.connection,
            "memory": self.memory,
            "total": self.total,
        }


def cpu_points(cpu_cores: int) -> int:
    return min(cpu_cores * WEIGHTS["cpu_per_core"], WEIGHTS["cpu_cap"])


def screen_points(effective_pixels: float) -> int:
    for threshold, points in SCREEN_BUCKETS:
        if effective_pixels > threshold:
            return points
    return SCREEN_FLOOR


def connection_points(capabilities: DeviceCapabilities) -> int:
    if capabilities.connection is None:
        return WEIGHTS["connection_neutral"]
    # Reported but unrecognized connection types earn nothing
    return CONNECTION_POINTS.get(capabilities.connection.effective_type, 0)


def memory_points(memory_hint: float | None) -> float:
    if memory_hint is None:
        return WEIGHTS["memory_neutral"]
    return min(memory_hint, WEIGHTS["memory_cap"])


def score_breakdown(capabilities: DeviceCapabilities) -> ScoreBreakdown:
    """Compute each capped contribution separately."""
    return ScoreBreakdown(
        cpu=cpu_points(capabilities.cpu_cores),
        screen=screen_points(capabilities.effective_pixels),
        graphics=WEIGHTS["graphics"] if capabilities.has_graphics_acceleration else 0,
        connection=connection_points(capabilities),
        memory=memory_points(capabilities.memory_hint),
    )


def score(capabilities: DeviceCapabilities) -> int:
    """
    Compute the performance score for a capability snapshot.

    Args:
        capabilities: Probed device capabilities

    Returns:
        Integer score clamped to [0, 100]
    """
    breakdown = score_breakdown(capabilities)
    total = breakdown.total
    logger.debug(f"Performance score {total} from {breakdown.to_dict()}")
    return total
