"""
Device Context.

The value the embedding application holds for "the current device": raw
capabilities plus every decision derived from them. It is rebuilt, never
mutated, whenever the application sees a resize or network-change event.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from src.fidelity import classifier, scorer
from src.fidelity.interaction import resolve_modes
from src.fidelity.models import (
    AvatarFidelityTier,
    Bandwidth,
    ContentQualityTier,
    DeviceCapabilities,
    DeviceClass,
    InteractionMode,
    Orientation,
)
from src.fidelity.tiers import classify_bandwidth, select_avatar_fidelity, select_content_quality


class DeviceContext(BaseModel):
    """
    Capabilities plus the decisions derived from them.

    Attributes:
        capabilities: Probed snapshot
        is_mobile_user_agent: Whether the client identified as mobile/tablet
        device_class: Classifier output
        orientation: Landscape or portrait
        performance_score: 0-100 score
        avatar_fidelity: Selected (or user-preferred) avatar tier
        detected_avatar_fidelity: What the selector chose before any override
        preferred_avatar_fidelity: Stored user override, if any
        content_quality: Selected content tier (never user-overridable)
        bandwidth: Coarse bandwidth class of the connection
        interaction_modes: Enabled input modalities
    """

    model_config = ConfigDict(frozen=True)

    capabilities: DeviceCapabilities
    is_mobile_user_agent: bool = False
    device_class: DeviceClass
    orientation: Orientation
    performance_score: int
    avatar_fidelity: AvatarFidelityTier
    detected_avatar_fidelity: AvatarFidelityTier
    preferred_avatar_fidelity: Optional[AvatarFidelityTier] = None
    content_quality: ContentQualityTier
    bandwidth: Bandwidth
    interaction_modes: frozenset[InteractionMode]

    @property
    def avatar_overridden(self) -> bool:
        return self.preferred_avatar_fidelity is not None

    @classmethod
    def build(
        cls,
        capabilities: DeviceCapabilities,
        is_mobile_user_agent: bool = False,
        preferred_avatar_fidelity: Optional[AvatarFidelityTier] = None,
    ) -> DeviceContext:
        """
        Derive every decision for a capability snapshot.

        Args:
            capabilities: Probed capabilities
            is_mobile_user_agent: Mobile/tablet user-agent signal
            preferred_avatar_fidelity: Stored user override for this device class

        Returns:
            New DeviceContext
        """
        device_class = classifier.classify(
            capabilities.screen_width, capabilities.screen_height, is_mobile_user_agent
        )
        points = scorer.score(capabilities)
        detected = select_avatar_fidelity(capabilities, device_class, points)

        return cls(
            capabilities=capabilities,
            is_mobile_user_agent=is_mobile_user_agent,
            device_class=device_class,
            orientation=classifier.orientation(capabilities.screen_width, capabilities.screen_height),
            performance_score=points,
            avatar_fidelity=preferred_avatar_fidelity or detected,
            detected_avatar_fidelity=detected,
            preferred_avatar_fidelity=preferred_avatar_fidelity,
            content_quality=select_content_quality(capabilities, device_class, points),
            bandwidth=classify_bandwidth(capabilities.connection),
            interaction_modes=resolve_modes(capabilities, device_class),
        )

    def recompute(
        self,
        capabilities: Optional[DeviceCapabilities] = None,
        is_mobile_user_agent: Optional[bool] = None,
        preferred_avatar_fidelity: Optional[AvatarFidelityTier] = None,
        clear_preference: bool = False,
    ) -> DeviceContext:
        """
        Rebuild after a resize or network change.

        Preferences are stored per device class, so an existing override is
        only carried over while the device class stays the same. Pass
        `clear_preference=True` to drop the override and return to the
        detected avatar tier.
        """
        capabilities = capabilities if capabilities is not None else self.capabilities
        if is_mobile_user_agent is None:
            is_mobile_user_agent = self.is_mobile_user_agent

        if clear_preference:
            preferred_avatar_fidelity = None
        elif preferred_avatar_fidelity is None and self.avatar_overridden:
            new_class = classifier.classify(
                capabilities.screen_width, capabilities.screen_height, is_mobile_user_agent
            )
            if new_class is self.device_class:
                preferred_avatar_fidelity = self.preferred_avatar_fidelity

        return DeviceContext.build(capabilities, is_mobile_user_agent, preferred_avatar_fidelity)

    def to_dict(self) -> dict:
        return {
            "device_class": self.device_class.value,
            "orientation": self.orientation.value,
            "performance_score": self.performance_score,
            "avatar_fidelity": self.avatar_fidelity.value,
            "detected_avatar_fidelity": self.detected_avatar_fidelity.value,
            "content_quality": self.content_quality.value,
            "bandwidth": self.bandwidth.value,
            "interaction_modes": sorted(mode.value for mode in self.interaction_modes),
        }
