"""
Device-Adaptive Fidelity Engine.

Selects content quality and avatar fidelity for the client device and
reshapes lesson content to match.

Components:
- CapabilityProbe: Reads raw device/network signals into DeviceCapabilities
- scorer: Weighted 0-100 performance score
- classifier: mobile / tablet / laptop / desktop classification
- tiers: Avatar fidelity and content quality selection
- content_adapter: Device-specific copies of lesson content
- interaction: Enabled input modalities
- DeviceContext: All of the above for one device snapshot
- FidelityEngine: Orchestration over probe, stores and adapter
"""
from src.fidelity.models import (
    AvatarFidelityTier,
    Bandwidth,
    ConnectionInfo,
    ContentItem,
    ContentQualityTier,
    ContentType,
    DeviceCapabilities,
    DeviceClass,
    EffectiveConnectionType,
    InteractionMode,
    Orientation,
    ProcessingPower,
)
from src.fidelity.errors import ContentNotFoundError, FidelityError, StoreUnavailableError
from src.fidelity.scorer import score
from src.fidelity.classifier import classify, is_mobile_user_agent
from src.fidelity.tiers import classify_bandwidth, select_avatar_fidelity, select_content_quality
from src.fidelity.content_adapter import adapt
from src.fidelity.interaction import resolve_modes
from src.fidelity.signals import ClientHintsSignalSource, SignalSource, SnapshotSignalSource
from src.fidelity.probe import CapabilityProbe, probe
from src.fidelity.context import DeviceContext
from src.fidelity.avatar import AvatarAssetBundle, avatar_asset_bundle
from src.fidelity.stores import InMemoryLessonStore, InMemoryPreferenceStore
from src.fidelity.engine import FidelityEngine

__all__ = [
    # Main engine
    "FidelityEngine",
    "DeviceContext",
    # Decision functions
    "score",
    "classify",
    "is_mobile_user_agent",
    "select_avatar_fidelity",
    "select_content_quality",
    "classify_bandwidth",
    "adapt",
    "resolve_modes",
    # Probing
    "CapabilityProbe",
    "probe",
    "SignalSource",
    "SnapshotSignalSource",
    "ClientHintsSignalSource",
    # Avatar
    "AvatarAssetBundle",
    "avatar_asset_bundle",
    # Stores
    "InMemoryLessonStore",
    "InMemoryPreferenceStore",
    # Data models
    "DeviceCapabilities",
    "ConnectionInfo",
    "ContentItem",
    # Enums
    "DeviceClass",
    "AvatarFidelityTier",
    "ContentQualityTier",
    "ContentType",
    "EffectiveConnectionType",
    "Bandwidth",
    "ProcessingPower",
    "Orientation",
    "InteractionMode",
    # Errors
    "FidelityError",
    "ContentNotFoundError",
    "StoreUnavailableError",
]
