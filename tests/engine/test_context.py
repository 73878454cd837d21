"""Tests for function context extraction."""

import pytest

from glsl_debug.engine.context import extract_function_context
from glsl_debug.engine.errors import ShaderDebugError
from glsl_debug.engine.models import ParameterMode


def test_helper_context(circle_source):
    """Test parameters of a helper function."""
    context = extract_function_context(circle_source, 1)
    assert context.function_name == "sdCircle"
    assert context.return_type == "float"
    assert context.is_function
    assert [p.name for p in context.parameters] == ["p", "r"]

    p, r = context.parameters
    assert p.mode is ParameterMode.UV
    assert p.uv_value == "uv"
    assert p.default_custom_value == "vec2(0.5)"
    assert r.mode is ParameterMode.CUSTOM
    assert r.custom_value == "0.5"
    assert r.index == 1


def test_entry_context(circle_source):
    """Test that mainImage is not a function and hides its output."""
    context = extract_function_context(circle_source, 6)
    assert context.function_name == "mainImage"
    assert context.return_type == "void"
    assert not context.is_function
    assert [p.name for p in context.parameters] == ["fragCoord"]


@pytest.mark.parametrize("line", [3, 100])
def test_no_context(circle_source, line):
    """Test lines outside every function."""
    assert extract_function_context(circle_source, line) is None


def test_negative_line(circle_source):
    """Test that a negative line is rejected."""
    with pytest.raises(ShaderDebugError):
        extract_function_context(circle_source, -1)


def test_parameter_filter():
    """Test that out parameters and unknown types are skipped."""
    source = "\n".join(
        [
            "void f(out float a, inout vec3 b, Ray r, float c) {",
            "  c += 1.0;",
            "}",
        ]
    )
    context = extract_function_context(source, 1)
    assert [(p.name, p.index) for p in context.parameters] == [("b", 1), ("c", 3)]


def test_loops_through_query_line(loop_source):
    """Test that only loops up to the query line are listed."""
    assert extract_function_context(loop_source, 11).loops == []

    loops = extract_function_context(loop_source, 14).loops
    assert len(loops) == 1
    assert loops[0].line_number == 12
    assert loops[0].end_line == 15
    assert loops[0].loop_header == "for (int i = 0; i < 100; i++)"


def test_loops_from_signature(loop_source):
    """Test that a signature line lists every loop of the function."""
    loops = extract_function_context(loop_source, 0).loops
    assert [loop.line_number for loop in loops] == [2]


def test_loop_caps_annotated(loop_source):
    """Test that recorded caps are reported."""
    context = extract_function_context(loop_source, 14, {0: 5})
    assert context.loops[0].max_iter == 5


def test_to_dict(circle_source):
    """Test the JSON-ready representation."""
    data = extract_function_context(circle_source, 1).to_dict()
    assert data["functionName"] == "sdCircle"
    assert data["isFunction"] is True
    assert data["parameters"][0]["mode"] == "uv"
    assert data["parameters"][1]["defaultCustomValue"] == "0.5"
    assert data["loops"] == []
