"""
Unit tests for interaction mode resolution.
"""

from src.fidelity.interaction import resolve_modes
from src.fidelity.models import DeviceCapabilities, DeviceClass, InteractionMode as M


class TestResolveModes:
    def test_desktop_with_camera_and_mic(self, desktop_capabilities):
        modes = resolve_modes(desktop_capabilities, DeviceClass.DESKTOP)
        assert modes == {M.KEYBOARD, M.MOUSE, M.VOICE, M.GESTURE}

    def test_phone(self, phone_capabilities):
        modes = resolve_modes(phone_capabilities, DeviceClass.MOBILE)
        assert modes == {M.TOUCH, M.VOICE, M.GESTURE, M.MOTION}

    def test_tablet_gets_stylus_not_keyboard(self):
        modes = resolve_modes(DeviceCapabilities(touch_support=True), DeviceClass.TABLET)
        assert modes == {M.TOUCH, M.STYLUS}

    def test_spatial_needs_camera(self):
        without_camera = DeviceCapabilities(has_spatial_computing_support=True)
        with_camera = DeviceCapabilities(has_spatial_computing_support=True, has_camera=True)

        assert M.SPATIAL not in resolve_modes(without_camera, DeviceClass.MOBILE)
        assert M.SPATIAL in resolve_modes(with_camera, DeviceClass.MOBILE)

    def test_laptop_defaults(self):
        assert resolve_modes(DeviceCapabilities(), DeviceClass.LAPTOP) == {M.KEYBOARD, M.MOUSE}

    def test_unknown_class_treated_as_non_handheld(self):
        assert resolve_modes(DeviceCapabilities(), "kiosk") == {M.KEYBOARD, M.MOUSE}

    def test_result_is_immutable(self):
        assert isinstance(resolve_modes(DeviceCapabilities(), DeviceClass.DESKTOP), frozenset)
