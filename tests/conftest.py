"""Shared pytest fixtures for the bridge tests."""

import pathlib
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure project root is on sys.path for direct module imports in tests
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from constants import KIND_FAN, KIND_TOGGLE_LIGHT  # noqa: E402
from models import AccessoryConfig, HttpAction, LevelTable, MqttAction, ToggleSpec  # noqa: E402


@pytest.fixture
def dispatcher():
    """Dispatcher double that records every action."""
    mock = MagicMock()
    mock.dispatch = AsyncMock(return_value=200)
    return mock


@pytest.fixture
def fan_config():
    """Fan from the classic three-speed example."""
    return AccessoryConfig(
        name="Fan",
        kind=KIND_FAN,
        manufacturer="Acme",
        model="F1",
        serial="F1-0001",
        default_power_on=False,
        default_value=50,
        levels=LevelTable.from_pairs([
            (0, HttpAction("http://fan/off")),
            (10, HttpAction("http://fan/a")),
            (50, HttpAction("http://fan/b")),
            (90, HttpAction("http://fan/c")),
        ]),
    )


@pytest.fixture
def toggle_config():
    """Four stop toggle lamp cycling 75 -> 50 -> 25 -> off."""
    return AccessoryConfig(
        name="Lamp",
        kind=KIND_TOGGLE_LIGHT,
        manufacturer="Acme",
        model="T1",
        serial="T1-0001",
        default_power_on=False,
        default_value=75,
        toggle=ToggleSpec(
            level_count=4,
            ascending=False,
            pulse_action=MqttAction("lamp/pulse", b"1"),
            settle_delay=0.5,
        ),
    )
