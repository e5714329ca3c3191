"""
Capability Probe.

Turns a SignalSource into a DeviceCapabilities snapshot. Probing never
fails: a signal that cannot be read (missing, malformed, or raising) falls
back to its documented default and is logged at DEBUG.

Microphone and camera detection both go through device enumeration, which
can hang or reject on some platforms. The two lookups run concurrently and
share one overall timeout; anything that does not finish in time resolves to
False.
"""
from __future__ import annotations

import asyncio
import math
import time
from typing import Any, Callable, Mapping, Optional, TypeVar

from loguru import logger
from pydantic import ValidationError

from src.fidelity.models import ConnectionInfo, DeviceCapabilities, ProcessingPower
from src.fidelity.signals import SignalSource

T = TypeVar("T")

DEFAULTS = {
    "viewport": (1024, 768),
    "pixel_ratio": 1.0,
    "cpu_cores": 2,
}

AUDIO_INPUT = "audioinput"
VIDEO_INPUT = "videoinput"


def estimate_processing_power(cpu_cores: Optional[int], memory_hint: Optional[float]) -> ProcessingPower:
    """
    Infer processing power from hardware hints.

    Two cores or less, or under 2 GB of memory, is low. Eight cores with at
    least 8 GB is high. A hint that was not sensed never votes either way, so
    a device that exposes neither is medium.
    """
    if (cpu_cores is not None and cpu_cores <= 2) or (memory_hint is not None and memory_hint < 2):
        return ProcessingPower.LOW
    if cpu_cores is not None and cpu_cores >= 8 and memory_hint is not None and memory_hint >= 8:
        return ProcessingPower.HIGH
    return ProcessingPower.MEDIUM


def run_processing_benchmark(
    iterations: int,
    high_max_ms: float,
    medium_max_ms: float,
) -> ProcessingPower:
    """Time a fixed square-root workload and bucket the duration."""
    start = time.perf_counter()
    total = 0.0
    for i in range(iterations):
        total += math.sqrt(i)
    duration_ms = (time.perf_counter() - start) * 1000

    logger.debug(f"Processing benchmark: {iterations} iterations in {duration_ms:.1f}ms")
    if duration_ms < high_max_ms:
        return ProcessingPower.HIGH
    if duration_ms < medium_max_ms:
        return ProcessingPower.MEDIUM
    return ProcessingPower.LOW


def parse_connection(raw: Optional[Mapping[str, Any]]) -> Optional[ConnectionInfo]:
    """
    Build ConnectionInfo from a Network Information style mapping.

    Accepts camelCase or snake_case keys. Negative or non-numeric downlink/rtt
    values are dropped to 0.
    """
    if raw is None:
        return None

    def pick(*keys: str) -> Any:
        for key in keys:
            if raw.get(key) is not None:
                return raw[key]
        return None

    def non_negative(value: Any) -> float:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
        return number if number >= 0 and number == number else 0.0

    save_data = pick("saveData", "save_data")
    if isinstance(save_data, str):
        save_data = save_data.strip().lower() in ("1", "true", "yes", "on")

    try:
        return ConnectionInfo(
            effective_type=pick("effectiveType", "effective_type") or "unknown",
            downlink=non_negative(pick("downlink")),
            rtt=non_negative(pick("rtt")),
            save_data=bool(save_data),
        )
    except ValidationError as e:
        logger.debug(f"Unusable connection info {dict(raw)!r}: {e}")
        return None


class CapabilityProbe:
    """
    Read a SignalSource into an immutable DeviceCapabilities snapshot.

    The snapshot is valid until the embedding application decides to probe
    again (viewport resize, network change).
    """

    def __init__(
        self,
        enumeration_timeout: float = 2.0,
        benchmark: bool = False,
        benchmark_iterations: int = 250_000,
        benchmark_thresholds_ms: tuple[float, float] = (50.0, 200.0),
    ):
        self.enumeration_timeout = enumeration_timeout
        self.benchmark = benchmark
        self.benchmark_iterations = benchmark_iterations
        self.benchmark_thresholds_ms = benchmark_thresholds_ms

    @classmethod
    def from_settings(cls, settings: Any = None) -> CapabilityProbe:
        if settings is None:
            from config import get_settings

            settings = get_settings()
        return cls(
            enumeration_timeout=settings.enumeration_timeout_seconds,
            benchmark=settings.processing_benchmark_enabled,
            benchmark_iterations=settings.processing_benchmark_iterations,
            benchmark_thresholds_ms=(
                settings.processing_high_max_ms,
                settings.processing_medium_max_ms,
            ),
        )

    async def probe(self, source: SignalSource) -> DeviceCapabilities:
        """
        Probe all signals from a source.

        Args:
            source: Where to read raw signals from

        Returns:
            DeviceCapabilities with defaults filled in for anything unavailable
        """
        width, height = _read(source.viewport, DEFAULTS["viewport"], "viewport", _as_viewport)
        sensed_cores = _read(source.cpu_cores, None, "cpu_cores", _as_count)
        cpu_cores = sensed_cores if sensed_cores is not None else DEFAULTS["cpu_cores"]
        memory_hint = _read(source.memory_hint, None, "memory_hint", _as_positive_float)

        has_microphone, has_camera = await self._enumerate_media(source)

        if self.benchmark:
            high_ms, medium_ms = self.benchmark_thresholds_ms
            processing_power = await asyncio.to_thread(
                run_processing_benchmark, self.benchmark_iterations, high_ms, medium_ms
            )
        else:
            processing_power = estimate_processing_power(sensed_cores, memory_hint)

        capabilities = DeviceCapabilities(
            screen_width=width,
            screen_height=height,
            pixel_ratio=_read(source.pixel_ratio, DEFAULTS["pixel_ratio"], "pixel_ratio", _as_positive_float),
            touch_support=_read(source.touch_support, False, "touch_support", _as_bool),
            has_graphics_acceleration=_read(source.graphics_acceleration, False, "graphics_acceleration", _as_bool),
            cpu_cores=cpu_cores,
            has_realtime_communication=_read(
                source.realtime_communication, False, "realtime_communication", _as_bool
            ),
            has_microphone=has_microphone,
            has_camera=has_camera,
            has_orientation_sensor=_read(source.orientation_sensor, False, "orientation_sensor", _as_bool),
            has_spatial_computing_support=_read(source.spatial_computing, False, "spatial_computing", _as_bool),
            connection=parse_connection(_read(source.connection, None, "connection", _as_mapping)),
            memory_hint=memory_hint,
            processing_power=processing_power,
        )
        logger.debug(f"Probed capabilities: {capabilities.model_dump()}")
        return capabilities

    async def _enumerate_media(self, source: SignalSource) -> tuple[bool, bool]:
        """Resolve (has_microphone, has_camera) under one shared timeout."""
        try:
            results = await asyncio.wait_for(
                asyncio.gather(
                    _has_media_kind(source, AUDIO_INPUT),
                    _has_media_kind(source, VIDEO_INPUT),
                ),
                timeout=self.enumeration_timeout,
            )
        except asyncio.TimeoutError:
            logger.debug(f"Device enumeration exceeded {self.enumeration_timeout}s, assuming no media devices")
            return False, False
        return results[0], results[1]


async def probe(source: SignalSource, enumeration_timeout: float = 2.0) -> DeviceCapabilities:
    """Probe a source with default settings."""
    return await CapabilityProbe(enumeration_timeout=enumeration_timeout).probe(source)


async def _has_media_kind(source: SignalSource, kind: str) -> bool:
    try:
        kinds = await source.enumerate_devices()
    except Exception as e:
        logger.debug(f"Device enumeration failed for {kind}: {e}")
        return False
    if kinds is None:
        return False
    return kind in kinds


def _read(
    getter: Callable[[], Any],
    default: T,
    name: str,
    coerce: Callable[[Any], Optional[T]],
) -> T:
    """
    Read one signal, coerced to the snapshot field's type.

    A getter that raises, returns None, or returns something the coercer
    rejects yields the default.
    """
    try:
        raw = getter()
        if raw is None:
            return default
        value = coerce(raw)
    except Exception as e:
        logger.debug(f"Signal {name} unavailable ({e}), using default {default!r}")
        return default
    if value is None:
        logger.debug(f"Signal {name} unusable ({raw!r}), using default {default!r}")
        return default
    return value


def _as_positive_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    number = float(value)
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def _as_count(value: Any) -> Optional[int]:
    """Whole positive numbers only; 2.5 cores is not a core count."""
    number = _as_positive_float(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _as_viewport(value: Any) -> Optional[tuple[int, int]]:
    width, height = value
    width, height = _as_positive_float(width), _as_positive_float(height)
    if width is None or height is None:
        return None
    # Fractional CSS pixels round to the nearest whole pixel
    width, height = max(1, round(width)), max(1, round(height))
    return width, height


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off", ""):
            return False
    return None


def _as_mapping(value: Any) -> Optional[Mapping[str, Any]]:
    return value if isinstance(value, Mapping) else None
