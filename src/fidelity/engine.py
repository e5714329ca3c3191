"""
Fidelity Engine.

Orchestration layer over the pure decision functions:

    probe -> DeviceContext (class, score, tiers, modes) -> adapted lesson

Stores are injected. The engine holds no device state of its own; callers
keep the DeviceContext it returns and hand it back in.
"""
from __future__ import annotations

from typing import Optional

from loguru import logger

from src.fidelity.avatar import AvatarAssetBundle, avatar_asset_bundle
from src.fidelity.content_adapter import adapt
from src.fidelity.context import DeviceContext
from src.fidelity.errors import FidelityError
from src.fidelity.models import AvatarFidelityTier, ContentItem, DeviceCapabilities
from src.fidelity.probe import CapabilityProbe
from src.fidelity.signals import SignalSource
from src.fidelity.stores import DevicePreferenceStore, LessonStore, parse_content_items


class FidelityEngine:
    """
    Main entry point for device-adaptive content selection.

    Usage:
        engine = FidelityEngine(lesson_store=store, preference_store=store)
        context = await engine.detect(SnapshotSignalSource(payload), user_id="u1")
        items = await engine.load_lesson("lesson-42", context)
    """

    def __init__(
        self,
        lesson_store: Optional[LessonStore] = None,
        preference_store: Optional[DevicePreferenceStore] = None,
        probe: Optional[CapabilityProbe] = None,
        avatar_asset_base: str = "/assets/avatars",
    ):
        self._lessons = lesson_store
        self._preferences = preference_store
        self._probe = probe or CapabilityProbe()
        self._avatar_asset_base = avatar_asset_base

    async def detect(self, source: SignalSource, user_id: Optional[str] = None) -> DeviceContext:
        """
        Probe a signal source and build the device context.

        Args:
            source: Signal source for the client
            user_id: Signed-in user, if any, for the avatar preference lookup

        Returns:
            DeviceContext
        """
        capabilities = await self._probe.probe(source)
        return await self.resolve(capabilities, source.is_mobile(), user_id)

    async def resolve(
        self,
        capabilities: DeviceCapabilities,
        is_mobile_user_agent: bool = False,
        user_id: Optional[str] = None,
    ) -> DeviceContext:
        """Build a device context, applying the user's stored avatar override."""
        context = DeviceContext.build(capabilities, is_mobile_user_agent)
        preferred = await self._preferred_fidelity(user_id, context)
        if preferred is not None:
            context = context.recompute(preferred_avatar_fidelity=preferred)

        logger.debug(f"Device context: {context.to_dict()}")
        return context

    async def refresh(
        self,
        context: DeviceContext,
        source: SignalSource,
        user_id: Optional[str] = None,
    ) -> DeviceContext:
        """
        Re-probe after a resize or network change.

        The preference is looked up again when the device class changed,
        since preferences are stored per class.
        """
        capabilities = await self._probe.probe(source)
        updated = context.recompute(capabilities, source.is_mobile())
        if updated.device_class is not context.device_class:
            logger.info(f"Device class changed {context.device_class.value} -> {updated.device_class.value}")
            return await self.resolve(capabilities, source.is_mobile(), user_id)
        return updated

    async def load_lesson(self, lesson_id: str, context: DeviceContext) -> list[ContentItem]:
        """
        Fetch a lesson and adapt it for the device.

        Raises:
            ContentNotFoundError: Unknown lesson
            StoreUnavailableError: Lesson store failure
        """
        if self._lessons is None:
            raise RuntimeError("FidelityEngine has no lesson store configured")
        items = await self._lessons.fetch_lesson_content(lesson_id)
        return adapt(items, context.device_class, context.capabilities)

    async def load_module_content(self, module_id: str, context: DeviceContext) -> dict:
        """Fetch the module document for the device class and adapt its content list."""
        if self._lessons is None:
            raise RuntimeError("FidelityEngine has no lesson store configured")
        document = await self._lessons.fetch_adaptive_content(module_id, context.device_class)

        items = parse_content_items(document.get("content") or [], source=module_id)
        adapted = adapt(items, context.device_class, context.capabilities)
        return {**document, "content": [item.to_dict() for item in adapted]}

    async def set_avatar_preference(
        self,
        user_id: str,
        context: DeviceContext,
        tier: AvatarFidelityTier,
    ) -> DeviceContext:
        """Persist an avatar override for the current device class and apply it."""
        if self._preferences is None:
            raise RuntimeError("FidelityEngine has no preference store configured")
        await self._preferences.save_device_preference(user_id, context.device_class, tier)
        return context.recompute(preferred_avatar_fidelity=tier)

    def avatar_assets(self, context: DeviceContext, avatar_id: str = "default") -> AvatarAssetBundle:
        return avatar_asset_bundle(avatar_id, context.avatar_fidelity, self._avatar_asset_base)

    async def _preferred_fidelity(
        self, user_id: Optional[str], context: DeviceContext
    ) -> Optional[AvatarFidelityTier]:
        if user_id is None or self._preferences is None:
            return None
        try:
            return await self._preferences.fetch_device_preference(user_id, context.device_class)
        except FidelityError as e:
            logger.warning(f"Avatar preference lookup failed for user {user_id}, using detected tier: {e}")
            return None
