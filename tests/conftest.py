"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.fidelity.models import (  # noqa: E402
    ConnectionInfo,
    ContentItem,
    DeviceCapabilities,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def desktop_capabilities():
    """A well-equipped desktop on a 4g-class connection."""
    return DeviceCapabilities(
        screen_width=2560,
        screen_height=1440,
        pixel_ratio=1.0,
        has_graphics_acceleration=True,
        cpu_cores=8,
        has_microphone=True,
        has_camera=True,
        connection=ConnectionInfo(effective_type="4g", downlink=10.0, rtt=50.0),
        memory_hint=8.0,
    )


@pytest.fixture
def phone_capabilities():
    """A mid-range phone on 3g."""
    return DeviceCapabilities(
        screen_width=390,
        screen_height=844,
        pixel_ratio=3.0,
        touch_support=True,
        has_graphics_acceleration=True,
        cpu_cores=6,
        has_microphone=True,
        has_camera=True,
        has_orientation_sensor=True,
        connection=ConnectionInfo(effective_type="3g", downlink=1.5, rtt=300.0),
        memory_hint=4.0,
    )


@pytest.fixture
def sample_lesson():
    """A lesson with one item of each interesting kind."""
    return [
        ContentItem.model_validate({"id": "intro", "type": "text", "content": "Welcome"}),
        ContentItem.model_validate({
            "id": "heart",
            "type": "3d-model",
            "content": "models/heart.glb",
            "requiresGraphicsAcceleration": True,
            "fallbackContent": "images/heart.png",
        }),
        ContentItem.model_validate({
            "id": "lecture",
            "type": "video",
            "content": "videos/lecture.mp4",
            "quality": "high",
        }),
        ContentItem.model_validate({
            "id": "diagram",
            "type": "high-res-image",
            "content": "images/diagram@4x.png",
        }),
        ContentItem.model_validate({
            "id": "circuit",
            "type": "complex-simulation",
            "content": "sims/circuit.json",
            "fallbackContent": "images/circuit.png",
        }),
        ContentItem.model_validate({"id": "check", "type": "quiz", "content": "quizzes/q1.json"}),
    ]
