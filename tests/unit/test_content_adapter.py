"""
Unit tests for the content adapter.

Covers the three rewrite rules, their ordering, the malformed-content
policy, and idempotence.
"""

import itertools

import pytest

from src.fidelity.content_adapter import adapt, adapt_item
from src.fidelity.models import (
    ConnectionInfo,
    ContentItem,
    ContentType,
    DeviceCapabilities,
    DeviceClass,
    ProcessingPower,
)


def item(**fields):
    return ContentItem.model_validate(fields)


MODEL = item(
    id="heart",
    type="3d-model",
    content="models/heart.glb",
    fallbackContent="images/heart.png",
)
GPU_MODEL = item(
    id="heart",
    type="3d-model",
    content="models/heart.glb",
    requiresGraphicsAcceleration=True,
    fallbackContent="videos/heart.mp4",
)
VIDEO = item(id="lecture", type="video", content="videos/lecture.mp4")


class TestSimplificationRule:
    def test_3d_model_on_mobile_becomes_simplified_image(self):
        adapted = adapt_item(MODEL, DeviceClass.MOBILE, DeviceCapabilities(has_graphics_acceleration=True))

        assert adapted.type is ContentType.SIMPLIFIED_IMAGE
        assert adapted.content == "images/heart.png"

    def test_complex_simulation_on_low_power_laptop(self):
        sim = item(type="complex-simulation", content="sims/a.json", fallbackContent="images/a.png")
        caps = DeviceCapabilities(has_graphics_acceleration=True, processing_power=ProcessingPower.LOW)

        adapted = adapt_item(sim, DeviceClass.LAPTOP, caps)

        assert adapted.type is ContentType.SIMPLIFIED_IMAGE
        assert adapted.content == "images/a.png"

    def test_plain_simulation_is_not_simplified(self):
        sim = item(type="simulation", content="sims/b.json", fallbackContent="images/b.png")
        adapted = adapt_item(sim, DeviceClass.MOBILE, DeviceCapabilities(has_graphics_acceleration=True))
        assert adapted == sim

    def test_3d_model_on_capable_desktop_unchanged(self):
        caps = DeviceCapabilities(has_graphics_acceleration=True, processing_power=ProcessingPower.HIGH)
        assert adapt_item(MODEL, DeviceClass.DESKTOP, caps) == MODEL

    def test_extra_fields_survive(self):
        adapted = adapt_item(MODEL, DeviceClass.MOBILE, DeviceCapabilities(has_graphics_acceleration=True))
        assert adapted.to_dict()["id"] == "heart"


class TestGraphicsRule:
    def test_requires_graphics_without_support_becomes_video(self):
        caps = DeviceCapabilities(has_graphics_acceleration=False, processing_power=ProcessingPower.HIGH)

        adapted = adapt_item(GPU_MODEL, DeviceClass.DESKTOP, caps)

        assert adapted.type is ContentType.VIDEO
        assert adapted.content == "videos/heart.mp4"

    def test_applies_after_simplification(self):
        # Rule 1 turns it into a simplified image, rule 2 still sees the original flag
        adapted = adapt_item(GPU_MODEL, DeviceClass.MOBILE, DeviceCapabilities(has_graphics_acceleration=False))

        assert adapted.type is ContentType.VIDEO
        assert adapted.content == "videos/heart.mp4"

    def test_requires_graphics_with_support_unchanged(self):
        caps = DeviceCapabilities(has_graphics_acceleration=True, processing_power=ProcessingPower.HIGH)
        assert adapt_item(GPU_MODEL, DeviceClass.DESKTOP, caps) == GPU_MODEL

    def test_legacy_webgl_flag_is_honoured(self):
        legacy = item(type="spatial", content="ar/scene.usdz", requiresWebGL=True, fallbackContent="videos/scene.mp4")
        adapted = adapt_item(legacy, DeviceClass.DESKTOP, DeviceCapabilities())
        assert adapted.type is ContentType.VIDEO


class TestBandwidthRule:
    @pytest.mark.parametrize("effective_type", ["2g", "slow-2g"])
    def test_video_compressed_on_low_bandwidth(self, effective_type):
        caps = DeviceCapabilities(
            has_graphics_acceleration=True,
            connection=ConnectionInfo(effective_type=effective_type),
        )

        adapted = adapt_item(VIDEO, DeviceClass.DESKTOP, caps)

        assert adapted.quality == "low"
        assert adapted.size == "compressed"
        assert adapted.type is ContentType.VIDEO
        assert adapted.content == "videos/lecture.mp4"

    def test_high_res_image_compressed(self):
        image = item(type="high-res-image", content="images/big.png")
        caps = DeviceCapabilities(connection=ConnectionInfo(effective_type="2g"))
        adapted = adapt_item(image, DeviceClass.DESKTOP, caps)
        assert (adapted.quality, adapted.size) == ("low", "compressed")

    def test_3g_not_compressed(self):
        caps = DeviceCapabilities(connection=ConnectionInfo(effective_type="3g"))
        assert adapt_item(VIDEO, DeviceClass.DESKTOP, caps) == VIDEO

    def test_simplified_image_not_compressed(self):
        caps = DeviceCapabilities(has_graphics_acceleration=True, connection=ConnectionInfo(effective_type="2g"))
        adapted = adapt_item(MODEL, DeviceClass.MOBILE, caps)

        assert adapted.type is ContentType.SIMPLIFIED_IMAGE
        assert adapted.quality is None
        assert adapted.size is None

    def test_graphics_fallback_video_is_compressed(self):
        caps = DeviceCapabilities(has_graphics_acceleration=False, connection=ConnectionInfo(effective_type="2g"))
        adapted = adapt_item(GPU_MODEL, DeviceClass.DESKTOP, caps)

        assert adapted.type is ContentType.VIDEO
        assert adapted.size == "compressed"


class TestMalformedContent:
    def test_missing_fallback_skips_simplification(self):
        bare = item(type="3d-model", content="models/x.glb")
        adapted = adapt_item(bare, DeviceClass.MOBILE, DeviceCapabilities(has_graphics_acceleration=True))
        assert adapted == bare

    def test_missing_fallback_skips_graphics_rule(self):
        bare = item(type="simulation", content="sims/x.json", requiresGraphicsAcceleration=True)
        adapted = adapt_item(bare, DeviceClass.DESKTOP, DeviceCapabilities(has_graphics_acceleration=False))
        assert adapted == bare

    def test_one_bad_item_does_not_stop_the_pass(self, sample_lesson):
        bare = item(type="3d-model", content="models/x.glb")
        adapted = adapt([bare, *sample_lesson], DeviceClass.MOBILE, DeviceCapabilities(has_graphics_acceleration=True))

        assert adapted[0] == bare
        assert adapted[2].type is ContentType.SIMPLIFIED_IMAGE


class TestAdapt:
    def test_input_is_not_mutated(self, sample_lesson):
        snapshot = [i.model_copy() for i in sample_lesson]
        caps = DeviceCapabilities(connection=ConnectionInfo(effective_type="2g"))

        adapt(sample_lesson, DeviceClass.MOBILE, caps)

        assert sample_lesson == snapshot

    def test_order_and_length_preserved(self, sample_lesson):
        adapted = adapt(sample_lesson, DeviceClass.MOBILE, DeviceCapabilities())
        assert len(adapted) == len(sample_lesson)
        assert [i.to_dict()["id"] for i in adapted] == [i.to_dict()["id"] for i in sample_lesson]

    def test_mobile_lesson(self, sample_lesson):
        caps = DeviceCapabilities(has_graphics_acceleration=True, connection=ConnectionInfo(effective_type="2g"))
        adapted = adapt(sample_lesson, DeviceClass.MOBILE, caps)

        assert [i.type for i in adapted] == [
            ContentType.TEXT,
            ContentType.SIMPLIFIED_IMAGE,
            ContentType.VIDEO,
            ContentType.HIGH_RES_IMAGE,
            ContentType.SIMPLIFIED_IMAGE,
            ContentType.QUIZ,
        ]
        assert adapted[2].size == "compressed"
        assert adapted[3].size == "compressed"

    def test_unknown_device_class_passes_through(self, sample_lesson):
        caps = DeviceCapabilities(has_graphics_acceleration=True, processing_power=ProcessingPower.HIGH)
        assert adapt(sample_lesson, "smartwatch", caps) == sample_lesson

    def test_idempotent(self, sample_lesson):
        lesson = [*sample_lesson, GPU_MODEL]
        classes = [*DeviceClass, None]
        gfx = [True, False]
        power = list(ProcessingPower)
        connections = [None, "2g", "3g", "4g"]

        for device_class, has_gfx, pp, conn in itertools.product(classes, gfx, power, connections):
            caps = DeviceCapabilities(
                has_graphics_acceleration=has_gfx,
                processing_power=pp,
                connection=None if conn is None else ConnectionInfo(effective_type=conn),
            )
            once = adapt(lesson, device_class, caps)
            twice = adapt(once, device_class, caps)
            assert twice == once
