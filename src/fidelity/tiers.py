"""
Tier Selector.

Picks the avatar fidelity tier and the content quality tier for a device.
Both selectors are ordered rule tables: the first matching rule wins.

Avatar fidelity:
    1. no graphics acceleration            -> text_only
    2. desktop and score > 70              -> high_3d
    3. desktop/laptop and score > 40       -> medium_2_5d
    4. mobile and score < 30               -> text_only
    5. otherwise                           -> low_2d

Content quality:
    1. save-data requested                 -> minimal
    2. connection known: branch on effective type
    3. connection unknown: branch on device class

Unknown or missing device classes fall through to the "otherwise" branches.
"""
from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from src.fidelity import scorer
from src.fidelity.models import (
    AvatarFidelityTier,
    Bandwidth,
    ConnectionInfo,
    ContentQualityTier,
    DeviceCapabilities,
    DeviceClass,
    EffectiveConnectionType,
)

# Scores are whole numbers with halves rounded up before these comparisons
THRESHOLDS = {
    "avatar_high_3d": 70,        # desktop only, strictly greater
    "avatar_medium_2_5d": 40,    # desktop or laptop, strictly greater
    "avatar_mobile_text": 30,    # mobile, strictly less
    "quality_ultra": 70,         # 4g desktop
    "quality_high_4g": 50,       # 4g any class
    "quality_medium_3g": 60,     # 3g any class
}

NO_CONNECTION_QUALITY = {
    DeviceClass.DESKTOP: ContentQualityTier.HIGH,
    DeviceClass.LAPTOP: ContentQualityTier.MEDIUM,
    DeviceClass.TABLET: ContentQualityTier.MEDIUM,
    DeviceClass.MOBILE: ContentQualityTier.LOW,
}

BANDWIDTH_BY_TYPE = {
    EffectiveConnectionType.SLOW_2G: Bandwidth.LOW,
    EffectiveConnectionType.G2: Bandwidth.LOW,
    EffectiveConnectionType.G3: Bandwidth.MEDIUM,
    EffectiveConnectionType.G4: Bandwidth.HIGH,
}


def normalize_device_class(value: Any) -> Optional[DeviceClass]:
    """Return the DeviceClass for a raw value, or None if unrecognized."""
    if isinstance(value, DeviceClass):
        return value
    if value is None:
        return None
    try:
        return DeviceClass(str(value).strip().lower())
    except ValueError:
        logger.debug(f"Unrecognized device class {value!r}, using fallback rules")
        return None


def classify_bandwidth(connection: Optional[ConnectionInfo]) -> Bandwidth:
    if connection is None:
        return Bandwidth.UNKNOWN
    return BANDWIDTH_BY_TYPE.get(connection.effective_type, Bandwidth.UNKNOWN)


def select_avatar_fidelity(
    capabilities: DeviceCapabilities,
    device_class: Any,
    performance_score: Optional[int] = None,
) -> AvatarFidelityTier:
    """
    Select the avatar fidelity tier.

    Args:
        capabilities: Probed device capabilities
        device_class: DeviceClass (raw strings and None are tolerated)
        performance_score: Precomputed score, computed from capabilities if omitted

    Returns:
        AvatarFidelityTier
    """
    if not capabilities.has_graphics_acceleration:
        return AvatarFidelityTier.TEXT_ONLY

    cls = normalize_device_class(device_class)
    points = scorer.score(capabilities) if performance_score is None else performance_score

    if cls is DeviceClass.DESKTOP and points > THRESHOLDS["avatar_high_3d"]:
        return AvatarFidelityTier.HIGH_3D
    if cls in (DeviceClass.DESKTOP, DeviceClass.LAPTOP) and points > THRESHOLDS["avatar_medium_2_5d"]:
        return AvatarFidelityTier.MEDIUM_2_5D
    if cls is DeviceClass.MOBILE and points < THRESHOLDS["avatar_mobile_text"]:
        return AvatarFidelityTier.TEXT_ONLY
    # Tablets always land here, even with a high score
    return AvatarFidelityTier.LOW_2D


def select_content_quality(
    capabilities: DeviceCapabilities,
    device_class: Any,
    performance_score: Optional[int] = None,
) -> ContentQualityTier:
    """
    Select the content quality tier.

    Save-data overrides everything. Otherwise the live connection decides,
    and the device class is only consulted when no connection info exists.
    """
    connection = capabilities.connection
    if connection is not None and connection.save_data:
        return ContentQualityTier.MINIMAL

    cls = normalize_device_class(device_class)

    if connection is not None:
        points = scorer.score(capabilities) if performance_score is None else performance_score
        effective = connection.effective_type

        if effective is EffectiveConnectionType.G4:
            if cls is DeviceClass.DESKTOP and points > THRESHOLDS["quality_ultra"]:
                return ContentQualityTier.ULTRA
            if points > THRESHOLDS["quality_high_4g"]:
                return ContentQualityTier.HIGH
            return ContentQualityTier.MEDIUM

        if effective is EffectiveConnectionType.G3:
            if points > THRESHOLDS["quality_medium_3g"]:
                return ContentQualityTier.MEDIUM
            return ContentQualityTier.LOW

        if effective in (EffectiveConnectionType.G2, EffectiveConnectionType.SLOW_2G):
            return ContentQualityTier.MINIMAL

        return ContentQualityTier.MEDIUM

    return NO_CONNECTION_QUALITY.get(cls, ContentQualityTier.MEDIUM)
