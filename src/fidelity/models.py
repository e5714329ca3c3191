"""
Fidelity Engine Data Models.

Value objects passed between the probe, the decision functions and the
rendering layer. Everything here is immutable: re-detection produces a new
snapshot rather than updating an old one.

Enums:
- DeviceClass: mobile / tablet / laptop / desktop
- AvatarFidelityTier: high_3d -> text_only (richest first)
- ContentQualityTier: ultra -> minimal (richest first)
- EffectiveConnectionType, Bandwidth, ProcessingPower, Orientation
- ContentType, InteractionMode
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class DeviceClass(str, Enum):
    """Coarse device categorization from screen geometry and user agent."""
    MOBILE = "mobile"
    TABLET = "tablet"
    LAPTOP = "laptop"
    DESKTOP = "desktop"


class AvatarFidelityTier(str, Enum):
    """Rendered avatar quality, ordered from richest to cheapest."""
    HIGH_3D = "high_3d"
    MEDIUM_2_5D = "medium_2_5d"
    LOW_2D = "low_2d"
    TEXT_ONLY = "text_only"


class ContentQualityTier(str, Enum):
    """Media quality level, ordered from richest to cheapest."""
    ULTRA = "ultra"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    MINIMAL = "minimal"


class EffectiveConnectionType(str, Enum):
    """Network Information API effective connection type."""
    SLOW_2G = "slow-2g"
    G2 = "2g"
    G3 = "3g"
    G4 = "4g"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> EffectiveConnectionType:
        """Coerce a raw value, mapping anything unrecognized to UNKNOWN."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class Bandwidth(str, Enum):
    """Coarse bandwidth class derived from the effective connection type."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


class ProcessingPower(str, Enum):
    """Coarse processing power estimate."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Orientation(str, Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"


class ContentType(str, Enum):
    """Closed set of content item kinds a lesson can contain."""
    VIDEO = "video"
    SIMULATION = "simulation"
    COMPLEX_SIMULATION = "complex-simulation"
    MODEL_3D = "3d-model"
    TEXT = "text"
    AUDIO = "audio"
    QUIZ = "quiz"
    SPATIAL = "spatial"
    IMAGE = "image"
    HIGH_RES_IMAGE = "high-res-image"
    SIMPLIFIED_IMAGE = "simplified-image"


class InteractionMode(str, Enum):
    """Input modalities the UI may enable."""
    TOUCH = "touch"
    KEYBOARD = "keyboard"
    MOUSE = "mouse"
    STYLUS = "stylus"
    VOICE = "voice"
    GESTURE = "gesture"
    SPATIAL = "spatial"
    MOTION = "motion"


class ConnectionInfo(BaseModel):
    """Snapshot of the client's network conditions."""

    model_config = ConfigDict(frozen=True)

    effective_type: EffectiveConnectionType = EffectiveConnectionType.UNKNOWN
    downlink: float = Field(default=0.0, ge=0)
    rtt: float = Field(default=0.0, ge=0)
    save_data: bool = False

    @field_validator("effective_type", mode="before")
    @classmethod
    def _coerce_effective_type(cls, value: Any) -> EffectiveConnectionType:
        return EffectiveConnectionType.parse(value)


class DeviceCapabilities(BaseModel):
    """
    Immutable snapshot of raw device and network signals.

    Every field has a default so that a partially-sensed device still
    produces a complete snapshot. `connection` and `memory_hint` stay None
    when the platform exposes no such API; the scorer treats None as neutral.
    """

    model_config = ConfigDict(frozen=True)

    screen_width: int = Field(default=1024, gt=0)
    screen_height: int = Field(default=768, gt=0)
    pixel_ratio: float = Field(default=1.0, gt=0)
    touch_support: bool = False
    has_graphics_acceleration: bool = False
    cpu_cores: int = Field(default=2, gt=0)
    has_realtime_communication: bool = False
    has_microphone: bool = False
    has_camera: bool = False
    has_orientation_sensor: bool = False
    has_spatial_computing_support: bool = False
    connection: Optional[ConnectionInfo] = None
    memory_hint: Optional[float] = Field(default=None, gt=0)
    processing_power: ProcessingPower = ProcessingPower.MEDIUM

    @property
    def effective_pixels(self) -> float:
        return self.screen_width * self.screen_height * self.pixel_ratio


class ContentItem(BaseModel):
    """
    One playable/renderable unit within a lesson.

    Unknown keys (ids, titles, durations) are carried through untouched so
    the renderer sees the same document it stored.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    type: ContentType
    content: Optional[str] = None
    requires_graphics_acceleration: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "requires_graphics_acceleration", "requiresGraphicsAcceleration", "requiresWebGL"
        ),
    )
    fallback_content: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("fallback_content", "fallbackContent"),
    )
    quality: Optional[str] = None
    size: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
