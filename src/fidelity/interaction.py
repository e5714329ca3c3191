"""Interaction Mode Resolver: which input modalities the UI should enable."""
from __future__ import annotations

from typing import Any

from src.fidelity.models import DeviceCapabilities, DeviceClass, InteractionMode
from src.fidelity.tiers import normalize_device_class


def resolve_modes(capabilities: DeviceCapabilities, device_class: Any) -> frozenset[InteractionMode]:
    """
    Derive the enabled interaction modes.

    Keyboard and mouse are assumed on anything that is not a phone or
    tablet. Spatial tracking needs both XR support and a camera.
    """
    cls = normalize_device_class(device_class)
    handheld = cls in (DeviceClass.MOBILE, DeviceClass.TABLET)

    flags = {
        InteractionMode.TOUCH: capabilities.touch_support,
        InteractionMode.KEYBOARD: not handheld,
        InteractionMode.MOUSE: not handheld,
        InteractionMode.STYLUS: cls is DeviceClass.TABLET,
        InteractionMode.VOICE: capabilities.has_microphone,
        InteractionMode.GESTURE: capabilities.has_camera,
        InteractionMode.SPATIAL: capabilities.has_spatial_computing_support and capabilities.has_camera,
        InteractionMode.MOTION: capabilities.has_orientation_sensor,
    }
    return frozenset(mode for mode, enabled in flags.items() if enabled)
