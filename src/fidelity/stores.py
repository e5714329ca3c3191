"""
Collaborator Stores.

The engine reads lessons and user device preferences through two narrow
async interfaces. Any backend that implements them can be injected; the
in-memory versions here back tests and the CLI, and
`src.integrations.document_store.DocumentStoreClient` talks to the REST
document store.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Protocol

from loguru import logger
from pydantic import ValidationError

from src.fidelity.errors import ContentNotFoundError
from src.fidelity.models import AvatarFidelityTier, ContentItem, DeviceClass


class LessonStore(Protocol):
    async def fetch_lesson_content(self, lesson_id: str) -> list[ContentItem]:
        ...

    async def fetch_adaptive_content(self, module_id: str, device_class: DeviceClass) -> dict[str, Any]:
        ...


class DevicePreferenceStore(Protocol):
    async def fetch_device_preference(
        self, user_id: str, device_class: DeviceClass
    ) -> Optional[AvatarFidelityTier]:
        ...

    async def save_device_preference(
        self, user_id: str, device_class: DeviceClass, tier: AvatarFidelityTier
    ) -> None:
        ...


def parse_content_items(raw_items: Iterable[Mapping[str, Any]], source: str = "") -> list[ContentItem]:
    """
    Parse stored content documents into ContentItems.

    Items that do not validate (unknown type, wrong field types) are dropped
    with a warning rather than failing the whole lesson.
    """
    items: list[ContentItem] = []
    for index, raw in enumerate(raw_items):
        try:
            items.append(ContentItem.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping invalid content item {index} in {source or 'lesson'}: {e.error_count()} errors")
    return items


def parse_avatar_preference(profile: Mapping[str, Any], device_class: DeviceClass) -> Optional[AvatarFidelityTier]:
    """Read devicePreferences.<class>.avatarFidelity from a user profile document."""
    preferences = profile.get("devicePreferences") or {}
    entry = preferences.get(device_class.value) or {}
    raw = entry.get("avatarFidelity") if isinstance(entry, Mapping) else None
    if raw is None:
        return None
    try:
        return AvatarFidelityTier(raw)
    except ValueError:
        logger.warning(f"Ignoring unknown avatar fidelity preference {raw!r} for {device_class.value}")
        return None


def select_module_document(
    documents: Iterable[Mapping[str, Any]],
    module_id: str,
    device_class: DeviceClass,
) -> dict[str, Any]:
    """
    Pick the content document for a module on a device class.

    A document listing the device class in ``deviceTypes`` wins; otherwise
    the module's ``isDefault`` document is used.

    Raises:
        ContentNotFoundError: Neither a targeted nor a default document exists
    """
    candidates = [doc for doc in documents if doc.get("moduleId") == module_id]
    for doc in candidates:
        if device_class.value in (doc.get("deviceTypes") or []):
            return dict(doc)
    for doc in candidates:
        if doc.get("isDefault"):
            logger.debug(f"No {device_class.value} content for module {module_id}, using default")
            return dict(doc)
    raise ContentNotFoundError(module_id)


class InMemoryLessonStore:
    """Lesson store over plain dictionaries."""

    def __init__(
        self,
        lessons: Mapping[str, Iterable[Mapping[str, Any]]] | None = None,
        module_documents: Iterable[Mapping[str, Any]] | None = None,
    ):
        self._lessons = {key: list(value) for key, value in (lessons or {}).items()}
        self._documents = list(module_documents or [])

    async def fetch_lesson_content(self, lesson_id: str) -> list[ContentItem]:
        if lesson_id not in self._lessons:
            raise ContentNotFoundError(lesson_id)
        return parse_content_items(self._lessons[lesson_id], source=lesson_id)

    async def fetch_adaptive_content(self, module_id: str, device_class: DeviceClass) -> dict[str, Any]:
        return select_module_document(self._documents, module_id, device_class)


class InMemoryPreferenceStore:
    """User device preferences keyed by user id, shaped like user profile documents."""

    def __init__(self, profiles: Mapping[str, Mapping[str, Any]] | None = None):
        self._profiles = {key: dict(value) for key, value in (profiles or {}).items()}

    async def fetch_device_preference(
        self, user_id: str, device_class: DeviceClass
    ) -> Optional[AvatarFidelityTier]:
        profile = self._profiles.get(user_id)
        if profile is None:
            return None
        return parse_avatar_preference(profile, device_class)

    async def save_device_preference(
        self, user_id: str, device_class: DeviceClass, tier: AvatarFidelityTier
    ) -> None:
        profile = self._profiles.setdefault(user_id, {})
        preferences = dict(profile.get("devicePreferences") or {})
        entry = dict(preferences.get(device_class.value) or {})
        entry["avatarFidelity"] = tier.value
        preferences[device_class.value] = entry
        profile["devicePreferences"] = preferences
        logger.info(f"Saved {device_class.value} avatar preference {tier.value} for user {user_id}")
