"""
hxpress kernel test configuration.

Kernel tests are pure: no IO, no network, no event loop. Every test starts
from the default settings regardless of the HXPRESS_* environment.
"""

import pytest

from hxpress.config import settings


@pytest.fixture(autouse=True)
def hx_settings(monkeypatch):
    """The live settings object, reset to defaults and restored after the test."""
    monkeypatch.setattr(settings, "ATTRIBUTE_PREFIX", "hx-")
    monkeypatch.setattr(settings, "URLENCODE_SAFE", "")
    return settings
