"""
Test Configuration
------------------
Shared fixtures for all tests.
"""

import sys
from pathlib import Path
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from commands.catalog import CommandCatalog
from core.detector import CommandDetector


WIFI_CATALOG = {
    "referents": ["wifi"],
    "commands": [
        {
            "id": 1,
            "name": "wifi",
            "triggers": ["on", "off"],
            "roles": [{"words": ["wifi"], "left": 3, "right": 3}],
            "stop_if": [[{"role": 0, "any_of": [""]}]],
            "returns": [
                {"when": [{"role": 0, "any_of": ["wifi"]},
                          {"role": "trigger", "any_of": ["on"]}],
                 "code": 3234},
                {"when": [{"role": 0, "any_of": ["wifi"]},
                          {"role": "trigger", "any_of": ["off"]}],
                 "code": 3235},
            ],
        },
        {
            "id": 2,
            "name": "music",
            "triggers": ["play"],
            "roles": [{"words": ["music"], "left": 0, "right": 2}],
            "returns": [{"code": 42}],
        },
    ],
}


@pytest.fixture(scope="session")
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def catalog():
    """The bundled command catalog."""
    return CommandCatalog.load()


@pytest.fixture(scope="function")
def wifi_catalog():
    """Small catalog with a wifi on/off command (id 1) and a music command (id 2)."""
    return CommandCatalog.from_dict(WIFI_CATALOG)


@pytest.fixture(scope="function")
def detector(catalog):
    """Detector over the bundled catalog."""
    return CommandDetector(catalog=catalog)


@pytest.fixture(scope="function")
def wifi_detector(wifi_catalog):
    """Detector over the wifi test catalog."""
    return CommandDetector(catalog=wifi_catalog)
