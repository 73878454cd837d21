"""Tests for default argument synthesis."""

import pytest

from glsl_debug.engine.constants import UV_SETUP
from glsl_debug.engine.defaults import (
    CallArguments,
    default_argument,
    default_arguments,
    ensure_uv_setup,
    parameter_info,
)
from glsl_debug.engine.glsl_types import GlslType
from glsl_debug.engine.models import FunctionParameter, ParameterMode


def param(name: str, type_name: str, index: int, qualifier: str | None = None):
    return FunctionParameter(name, type_name, qualifier, index)


@pytest.mark.parametrize(
    "glsl_type,expected",
    [
        (GlslType.VEC2, "uv"),
        (GlslType.VEC3, "vec3(0.5)"),
        (GlslType.VEC4, "vec4(0.5)"),
        (GlslType.FLOAT, "0.5"),
        (GlslType.INT, "1"),
        (GlslType.BOOL, "true"),
        (GlslType.MAT2, "mat2(1.0)"),
        (GlslType.MAT3, "mat3(1.0)"),
        (GlslType.MAT4, "mat4(1.0)"),
        (GlslType.SAMPLER2D, "iChannel0"),
        (None, "0.0"),
    ],
)
def test_default_argument(glsl_type, expected):
    """Test the literal synthesized for each parameter type."""
    assert default_argument(glsl_type) == expected


def test_default_arguments_in_order():
    """Test a full argument list for a typical helper."""
    call = default_arguments(
        [param("p", "vec2", 0), param("r", "float", 1), param("c", "vec3", 2)]
    )
    assert call.args == ["uv", "0.5", "vec3(0.5)"]
    assert call.setup == []


def test_overrides_replace_defaults():
    """Test that overrides are substituted verbatim by position."""
    call = default_arguments(
        [param("p", "vec2", 0), param("r", "float", 1)], {0: "vec2(0.3, 0.7)"}
    )
    assert call.args == ["vec2(0.3, 0.7)", "0.5"]


def test_output_parameters_get_locals():
    """Test that out and inout parameters are passed writable locals."""
    call = default_arguments(
        [
            param("p", "vec2", 0),
            param("n", "vec3", 1, "out"),
            param("acc", "float", 2, "inout"),
        ],
        {2: "0.25"},
    )
    assert call.args == ["uv", "_dbgOut1", "_dbgOut2"]
    assert call.setup == ["  vec3 _dbgOut1;", "  float _dbgOut2 = 0.25;"]


def test_uv_setup_added_once():
    """Test that the uv line is inserted once when an argument needs it."""
    call = ensure_uv_setup(CallArguments(args=["uv", "uv * 2.0"]))
    assert call.setup == [UV_SETUP]
    assert ensure_uv_setup(call).setup == [UV_SETUP]


def test_uv_setup_skipped_without_uv():
    """Test that no setup is added when nothing refers to uv."""
    call = ensure_uv_setup(CallArguments(args=["vec2(0.5)", "0.5"]))
    assert call.setup == []


def test_uv_setup_ignores_swizzles_and_other_names():
    """Test that `.uv` swizzles and longer names do not count as uv."""
    call = ensure_uv_setup(CallArguments(args=["p.uv", "uvScale"]))
    assert call.setup == []


@pytest.mark.parametrize(
    "type_name,custom,uv_value,mode",
    [
        ("vec2", "vec2(0.5)", "uv", ParameterMode.UV),
        ("float", "0.5", "uv.x", ParameterMode.CUSTOM),
        ("vec3", "vec3(0.5)", "vec3(uv, 0.0)", ParameterMode.CUSTOM),
        ("vec4", "vec4(0.5)", "vec4(uv, 0.0, 1.0)", ParameterMode.CUSTOM),
        ("int", "1", "int(uv.x * 10.0)", ParameterMode.CUSTOM),
        ("bool", "true", "uv.x > 0.5", ParameterMode.CUSTOM),
    ],
)
def test_parameter_info(type_name, custom, uv_value, mode):
    """Test the control panel metadata per parameter type."""
    info = parameter_info(param("x", type_name, 3))
    assert info.type == type_name
    assert info.default_custom_value == custom
    assert info.custom_value == custom
    assert info.uv_value == uv_value
    assert info.mode is mode
    assert info.index == 3


def test_centered_uv_values():
    """Test that centered coordinates are built from fragCoord."""
    for type_name in ("vec2", "float", "vec3", "vec4", "int"):
        value = parameter_info(param("x", type_name, 0)).centered_uv_value
        assert "fragCoord" in value
        assert "iResolution" in value
    assert parameter_info(param("x", "float", 0)).centered_uv_value.endswith(".x")
    assert parameter_info(param("x", "vec3", 0)).centered_uv_value.startswith("vec3(")
    assert parameter_info(param("x", "vec4", 0)).centered_uv_value.startswith("vec4(")
    assert parameter_info(param("x", "int", 0)).centered_uv_value.startswith("int(")
    assert "fragCoord" in parameter_info(param("x", "bool", 0)).centered_uv_value


def test_sampler_parameter_info():
    """Test that samplers default to the first channel."""
    info = parameter_info(param("tex", "sampler2D", 0))
    assert info.default_custom_value == "iChannel0"
    assert info.mode is ParameterMode.CUSTOM
