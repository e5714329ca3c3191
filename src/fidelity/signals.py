"""
Device Signal Sources.

A signal source answers raw questions about the client ("how wide is the
viewport?", "is WebGL available?") and returns None whenever it cannot tell.
It never decides anything; the probe turns its answers into a
DeviceCapabilities snapshot.

Sources:
- SignalSource: base class, every signal unavailable
- SnapshotSignalSource: a JSON snapshot posted by the browser client
- ClientHintsSignalSource: HTTP request headers (User-Agent Client Hints,
  Network Information hints, Save-Data)
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx
from loguru import logger

from src.fidelity.classifier import is_mobile_user_agent


class SignalSource:
    """
    Base signal source. Every signal is unavailable.

    Subclasses override the signals they can actually sense.
    """

    def viewport(self) -> Optional[tuple[int, int]]:
        return None

    def pixel_ratio(self) -> Optional[float]:
        return None

    def touch_support(self) -> Optional[bool]:
        return None

    def graphics_acceleration(self) -> Optional[bool]:
        return None

    def cpu_cores(self) -> Optional[int]:
        return None

    def realtime_communication(self) -> Optional[bool]:
        return None

    def orientation_sensor(self) -> Optional[bool]:
        return None

    def spatial_computing(self) -> Optional[bool]:
        return None

    def connection(self) -> Optional[Mapping[str, Any]]:
        return None

    def memory_hint(self) -> Optional[float]:
        return None

    def user_agent(self) -> Optional[str]:
        return None

    def mobile_hint(self) -> Optional[str]:
        return None

    def is_mobile(self) -> bool:
        return is_mobile_user_agent(self.user_agent(), self.mobile_hint())

    async def enumerate_devices(self) -> Optional[list[str]]:
        """
        List the kinds of attached media devices.

        Returns:
            Device kinds such as "audioinput"/"videoinput", or None when the
            platform has no enumeration API
        """
        return None


class SnapshotSignalSource(SignalSource):
    """
    Signals from a capability snapshot posted by the browser client.

    Key names follow the client's detection payload (camelCase), e.g.
    ``{"screenWidth": 1920, "hasWebGL": true, "connection": {...}}``.
    Media devices are listed under ``mediaDevices`` as ``[{"kind": ...}]``;
    an absent key means enumeration is unsupported.
    """

    def __init__(self, snapshot: Mapping[str, Any]):
        self._data = dict(snapshot)

    def _get(self, *keys: str) -> Any:
        for key in keys:
            if key in self._data and self._data[key] is not None:
                return self._data[key]
        return None

    def viewport(self) -> Optional[tuple[int, int]]:
        width = _positive_int(self._get("screenWidth", "innerWidth"))
        height = _positive_int(self._get("screenHeight", "innerHeight"))
        if width is None or height is None:
            return None
        return width, height

    def pixel_ratio(self) -> Optional[float]:
        return _positive_float(self._get("pixelRatio", "devicePixelRatio"))

    def touch_support(self) -> Optional[bool]:
        return _bool(self._get("touchSupport", "hasTouchScreen"))

    def graphics_acceleration(self) -> Optional[bool]:
        return _bool(self._get("hasGraphicsAcceleration", "hasWebGL"))

    def cpu_cores(self) -> Optional[int]:
        return _positive_int(self._get("cpuCores", "hardwareConcurrency"))

    def realtime_communication(self) -> Optional[bool]:
        return _bool(self._get("hasRealtimeCommunication", "hasWebRTC"))

    def orientation_sensor(self) -> Optional[bool]:
        return _bool(self._get("hasOrientationSensor", "hasGyroscope"))

    def spatial_computing(self) -> Optional[bool]:
        return _bool(self._get("hasSpatialComputingSupport", "hasARSupport", "hasAR"))

    def connection(self) -> Optional[Mapping[str, Any]]:
        raw = self._get("connection")
        return raw if isinstance(raw, Mapping) else None

    def memory_hint(self) -> Optional[float]:
        return _positive_float(self._get("memoryHint", "memory", "deviceMemory"))

    def user_agent(self) -> Optional[str]:
        raw = self._get("userAgent")
        return str(raw) if raw is not None else None

    async def enumerate_devices(self) -> Optional[list[str]]:
        raw = self._data.get("mediaDevices")
        if raw is None:
            return None
        kinds = []
        for device in raw:
            if isinstance(device, Mapping):
                kinds.append(str(device.get("kind", "")))
            else:
                kinds.append(str(device))
        return kinds


class ClientHintsSignalSource(SignalSource):
    """
    Signals from HTTP request headers.

    Covers what browsers send as client hints: viewport, DPR, device memory,
    effective connection type, RTT, downlink, Save-Data and the mobile hint.
    GPU, touch and sensor support are not exposed through headers and stay
    unavailable.
    """

    def __init__(self, headers: Mapping[str, str] | httpx.Headers):
        self._headers = httpx.Headers(headers)

    def _header(self, *names: str) -> Optional[str]:
        for name in names:
            value = self._headers.get(name)
            if value is not None and value.strip():
                return value.strip()
        return None

    def viewport(self) -> Optional[tuple[int, int]]:
        width = _positive_int(self._header("Sec-CH-Viewport-Width", "Viewport-Width"))
        height = _positive_int(self._header("Sec-CH-Viewport-Height"))
        if width is None:
            return None
        # Height is rarely sent; assume a 16:9 landscape viewport
        return width, height if height is not None else max(1, round(width * 9 / 16))

    def pixel_ratio(self) -> Optional[float]:
        return _positive_float(self._header("Sec-CH-DPR", "DPR"))

    def memory_hint(self) -> Optional[float]:
        return _positive_float(self._header("Sec-CH-Device-Memory", "Device-Memory"))

    def connection(self) -> Optional[Mapping[str, Any]]:
        ect = self._header("ECT")
        rtt = self._header("RTT")
        downlink = self._header("Downlink")
        save_data = self._header("Save-Data")
        if ect is None and rtt is None and downlink is None and save_data is None:
            return None
        return {
            "effectiveType": ect,
            "rtt": rtt,
            "downlink": downlink,
            "saveData": save_data is not None and save_data.lower() == "on",
        }

    def user_agent(self) -> Optional[str]:
        return self._header("User-Agent")

    def mobile_hint(self) -> Optional[str]:
        return self._header("Sec-CH-UA-Mobile")


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        if value is not None:
            logger.debug(f"Ignoring non-numeric signal {value!r}")
        return None
    return number if number > 0 else None


def _positive_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        if value is not None:
            logger.debug(f"Ignoring non-numeric signal {value!r}")
        return None
    if number != number or number <= 0:  # NaN
        return None
    return number


def _bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
