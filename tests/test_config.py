"""Tests for environment-driven configuration."""

import pytest

from glsl_debug.config import DebugConfig
from glsl_debug.engine import NormalizeMode, ShaderDebugError


def test_defaults():
    """Test the configuration without any variables set."""
    config = DebugConfig.from_env({})
    assert config.log_level == "WARNING"
    assert config.size == (800, 450)
    assert config.normalize_mode is NormalizeMode.OFF
    assert config.step_edge is None
    assert config.loop_cap is None


def test_from_env():
    """Test reading every variable."""
    config = DebugConfig.from_env(
        {
            "GLSL_DEBUG_LOG_LEVEL": "debug",
            "GLSL_DEBUG_WIDTH": "320",
            "GLSL_DEBUG_HEIGHT": "240",
            "GLSL_DEBUG_TIME": "2.5",
            "GLSL_DEBUG_NORMALIZE": "ABS",
            "GLSL_DEBUG_STEP": "0.25",
            "GLSL_DEBUG_LOOP_CAP": "16",
        }
    )
    assert config.log_level == "DEBUG"
    assert config.size == (320, 240)
    assert config.time == 2.5
    assert config.normalize_mode is NormalizeMode.ABS
    assert config.step_edge == 0.25
    assert config.loop_cap == 16


def test_empty_values_use_defaults():
    """Test that empty variables count as unset."""
    config = DebugConfig.from_env({"GLSL_DEBUG_WIDTH": "", "GLSL_DEBUG_STEP": ""})
    assert config.width == 800
    assert config.step_edge is None


@pytest.mark.parametrize(
    "environ,message",
    [
        ({"GLSL_DEBUG_WIDTH": "wide"}, "GLSL_DEBUG_WIDTH must be int"),
        ({"GLSL_DEBUG_HEIGHT": "0"}, "Render size must be positive"),
        ({"GLSL_DEBUG_LOG_LEVEL": "chatty"}, "Unknown log level"),
        ({"GLSL_DEBUG_NORMALIZE": "loud"}, "Unknown normalize mode"),
        ({"GLSL_DEBUG_LOOP_CAP": "-3"}, "Loop cap must not be negative"),
    ],
)
def test_invalid_values(environ, message):
    """Test that invalid variables raise with a useful message."""
    with pytest.raises(ShaderDebugError, match=message):
        DebugConfig.from_env(environ)
