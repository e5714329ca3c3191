"""
Device Classifier.

Maps screen geometry plus a user-agent hint onto a DeviceClass.

A mobile user agent is authoritative for the mobile/tablet split (decided on
the shorter screen edge). A desktop browser is classified by width alone, so
a narrow desktop window lands in the tablet band rather than mobile.
"""
from __future__ import annotations

import re

from src.fidelity.models import DeviceClass, Orientation

MOBILE_USER_AGENT = re.compile(
    r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini",
    re.IGNORECASE,
)

MOBILE_MAX_SHORT_EDGE = 768
TABLET_MAX_WIDTH = 1024
LAPTOP_MAX_WIDTH = 1440


def is_mobile_user_agent(user_agent: str | None, ch_ua_mobile: str | None = None) -> bool:
    """
    Check whether a client identifies as a mobile or tablet browser.

    Args:
        user_agent: Raw User-Agent header/string
        ch_ua_mobile: Optional Sec-CH-UA-Mobile client hint ("?1" or "?0")

    Returns:
        True when either signal says mobile
    """
    if ch_ua_mobile is not None and ch_ua_mobile.strip() == "?1":
        return True
    if not user_agent:
        return False
    return MOBILE_USER_AGENT.search(user_agent) is not None


def classify(screen_width: int, screen_height: int, is_known_mobile_user_agent: bool) -> DeviceClass:
    """Classify a device. First matching rule wins."""
    if is_known_mobile_user_agent:
        if min(screen_width, screen_height) < MOBILE_MAX_SHORT_EDGE:
            return DeviceClass.MOBILE
        return DeviceClass.TABLET

    if screen_width < TABLET_MAX_WIDTH:
        return DeviceClass.TABLET
    if screen_width < LAPTOP_MAX_WIDTH:
        return DeviceClass.LAPTOP
    return DeviceClass.DESKTOP


def orientation(screen_width: int, screen_height: int) -> Orientation:
    if screen_width > screen_height:
        return Orientation.LANDSCAPE
    return Orientation.PORTRAIT
