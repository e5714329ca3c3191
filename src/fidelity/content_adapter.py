"""
Content Adapter.

Rewrites a lesson's content items for one device context. The input items
are never modified; every rewrite produces a new item via `model_copy`.

Rules, applied per item in this order:
1. Mobile or low-power devices: 3D models and complex simulations become a
   simplified image of the declared fallback content.
2. Items that need graphics acceleration on a device without it become a
   video of the declared fallback content. This checks the original item's
   flag, so an item already simplified by rule 1 is still converted.
3. Low bandwidth: videos and high-res images are marked low quality and
   compressed. Type and primary content are left alone.

Rules key off device state only, never off previous output, so adapting an
already-adapted lesson with the same context is a no-op.
"""
from __future__ import annotations

from typing import Any, Iterable

from loguru import logger

from src.fidelity.models import (
    Bandwidth,
    ContentItem,
    ContentType,
    DeviceCapabilities,
    DeviceClass,
    ProcessingPower,
)
from src.fidelity.tiers import classify_bandwidth, normalize_device_class

SIMPLIFIABLE_TYPES = frozenset({ContentType.MODEL_3D, ContentType.COMPLEX_SIMULATION})
COMPRESSIBLE_TYPES = frozenset({ContentType.VIDEO, ContentType.HIGH_RES_IMAGE})

COMPRESSED_QUALITY = "low"
COMPRESSED_SIZE = "compressed"


def _needs_simplification(device_class: DeviceClass | None, capabilities: DeviceCapabilities) -> bool:
    return device_class is DeviceClass.MOBILE or capabilities.processing_power is ProcessingPower.LOW


def adapt_item(
    item: ContentItem,
    device_class: Any,
    capabilities: DeviceCapabilities,
) -> ContentItem:
    """Apply the three adaptation rules to a single item."""
    cls = normalize_device_class(device_class)
    adapted = item

    if item.type in SIMPLIFIABLE_TYPES and _needs_simplification(cls, capabilities):
        if item.fallback_content is None:
            logger.warning(f"Content item {_label(item)} has no fallback content, skipping simplification")
        else:
            adapted = adapted.model_copy(
                update={"type": ContentType.SIMPLIFIED_IMAGE, "content": item.fallback_content}
            )

    if item.requires_graphics_acceleration and not capabilities.has_graphics_acceleration:
        if item.fallback_content is None:
            logger.warning(f"Content item {_label(item)} needs graphics acceleration but has no fallback")
        else:
            adapted = adapted.model_copy(
                update={"type": ContentType.VIDEO, "content": item.fallback_content}
            )

    if adapted.type in COMPRESSIBLE_TYPES and classify_bandwidth(capabilities.connection) is Bandwidth.LOW:
        adapted = adapted.model_copy(update={"quality": COMPRESSED_QUALITY, "size": COMPRESSED_SIZE})

    return adapted


def adapt(
    lesson_content: Iterable[ContentItem],
    device_class: Any,
    capabilities: DeviceCapabilities,
) -> list[ContentItem]:
    """
    Produce a device-specific copy of a lesson's content.

    Args:
        lesson_content: Canonical content items (left untouched)
        device_class: Target DeviceClass
        capabilities: Probed device capabilities

    Returns:
        New list of adapted items, same length and order as the input
    """
    items = list(lesson_content)
    adapted = [adapt_item(item, device_class, capabilities) for item in items]

    changed = sum(1 for before, after in zip(items, adapted) if before is not after)
    if changed:
        logger.debug(f"Adapted {changed}/{len(items)} content items for {device_class}")
    return adapted


def _label(item: ContentItem) -> str:
    extra = item.model_extra or {}
    return str(extra.get("id") or item.type.value)
