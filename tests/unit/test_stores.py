"""
Unit tests for the in-memory stores and document helpers.
"""

import pytest

from src.fidelity.errors import ContentNotFoundError
from src.fidelity.models import AvatarFidelityTier, ContentType, DeviceClass
from src.fidelity.stores import (
    InMemoryLessonStore,
    InMemoryPreferenceStore,
    parse_avatar_preference,
    parse_content_items,
    select_module_document,
)

DOCUMENTS = [
    {"moduleId": "m1", "isDefault": True, "content": [{"type": "text", "content": "default"}]},
    {"moduleId": "m1", "deviceTypes": ["mobile", "tablet"], "content": [{"type": "text", "content": "small"}]},
    {"moduleId": "m2", "deviceTypes": ["desktop"], "content": []},
]


class TestParseContentItems:
    def test_invalid_items_dropped(self):
        items = parse_content_items([
            {"type": "video", "content": "a.mp4"},
            {"type": "hologram", "content": "b.holo"},
            {"content": "no type"},
            {"type": "quiz"},
        ])
        assert [item.type for item in items] == [ContentType.VIDEO, ContentType.QUIZ]


class TestParseAvatarPreference:
    def test_reads_nested_preference(self):
        profile = {"devicePreferences": {"mobile": {"avatarFidelity": "text_only"}}}
        assert parse_avatar_preference(profile, DeviceClass.MOBILE) is AvatarFidelityTier.TEXT_ONLY
        assert parse_avatar_preference(profile, DeviceClass.DESKTOP) is None

    def test_unknown_value_ignored(self):
        profile = {"devicePreferences": {"mobile": {"avatarFidelity": "hologram"}}}
        assert parse_avatar_preference(profile, DeviceClass.MOBILE) is None

    def test_empty_profile(self):
        assert parse_avatar_preference({}, DeviceClass.LAPTOP) is None


class TestSelectModuleDocument:
    def test_targeted_document_wins(self):
        doc = select_module_document(DOCUMENTS, "m1", DeviceClass.MOBILE)
        assert doc["content"][0]["content"] == "small"

    def test_default_document(self):
        doc = select_module_document(DOCUMENTS, "m1", DeviceClass.DESKTOP)
        assert doc["content"][0]["content"] == "default"

    def test_not_found(self):
        with pytest.raises(ContentNotFoundError) as exc_info:
            select_module_document(DOCUMENTS, "m2", DeviceClass.MOBILE)
        assert exc_info.value.key == "m2"
        assert str(exc_info.value) == "Content not found: m2"


class TestInMemoryLessonStore:
    @pytest.mark.asyncio
    async def test_fetch_lesson(self):
        store = InMemoryLessonStore({"l1": [{"type": "text", "content": "hi"}]})
        items = await store.fetch_lesson_content("l1")
        assert items[0].content == "hi"

    @pytest.mark.asyncio
    async def test_unknown_lesson(self):
        with pytest.raises(ContentNotFoundError):
            await InMemoryLessonStore().fetch_lesson_content("nope")

    @pytest.mark.asyncio
    async def test_fetch_adaptive_content(self):
        store = InMemoryLessonStore(module_documents=DOCUMENTS)
        doc = await store.fetch_adaptive_content("m1", DeviceClass.TABLET)
        assert doc["deviceTypes"] == ["mobile", "tablet"]


class TestInMemoryPreferenceStore:
    @pytest.mark.asyncio
    async def test_save_then_fetch(self):
        store = InMemoryPreferenceStore()

        await store.save_device_preference("u1", DeviceClass.MOBILE, AvatarFidelityTier.TEXT_ONLY)

        assert await store.fetch_device_preference("u1", DeviceClass.MOBILE) is AvatarFidelityTier.TEXT_ONLY
        assert await store.fetch_device_preference("u1", DeviceClass.DESKTOP) is None

    @pytest.mark.asyncio
    async def test_save_keeps_other_classes(self):
        store = InMemoryPreferenceStore({
            "u1": {"devicePreferences": {"desktop": {"avatarFidelity": "high_3d", "theme": "dark"}}}
        })

        await store.save_device_preference("u1", DeviceClass.DESKTOP, AvatarFidelityTier.LOW_2D)
        await store.save_device_preference("u1", DeviceClass.MOBILE, AvatarFidelityTier.TEXT_ONLY)

        assert await store.fetch_device_preference("u1", DeviceClass.DESKTOP) is AvatarFidelityTier.LOW_2D
        assert await store.fetch_device_preference("u1", DeviceClass.MOBILE) is AvatarFidelityTier.TEXT_ONLY

    @pytest.mark.asyncio
    async def test_unknown_user(self):
        assert await InMemoryPreferenceStore().fetch_device_preference("ghost", DeviceClass.MOBILE) is None
