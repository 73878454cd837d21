"""Tests for whole-program output post-processing."""

import pytest

from glsl_debug.engine.errors import ShaderDebugError
from glsl_debug.engine.post_processing import apply_output_post_processing

SOURCE = "\n".join(
    [
        "void mainImage(out vec4 fragColor, in vec2 fragCoord) {",
        "  fragColor = vec4(fragCoord.x - 0.5);",
        "}",
    ]
)


def test_nothing_to_apply():
    """Test that no mode and no threshold leave nothing to do."""
    assert apply_output_post_processing(SOURCE) is None
    assert apply_output_post_processing(SOURCE, "off", None) is None


def test_soft_mode():
    """Test soft normalization before the closing brace."""
    lines = apply_output_post_processing(SOURCE, "soft").split("\n")
    assert lines[2] == (
        "  fragColor.rgb = fragColor.rgb / (abs(fragColor.rgb) + vec3(1.0)) * 0.5 + 0.5;"
    )
    assert lines[-1] == "}"


def test_abs_mode_with_step():
    """Test abs normalization followed by the threshold."""
    lines = apply_output_post_processing(SOURCE, "abs", 0.25).split("\n")
    assert lines[2] == (
        "  fragColor.rgb = abs(fragColor.rgb) / (abs(fragColor.rgb) + vec3(1.0));"
    )
    assert lines[3] == "  fragColor = vec4(step(vec3(0.2500), fragColor.rgb), 1.0);"
    assert lines[4] == "}"


def test_step_only():
    """Test a threshold without normalization."""
    code = apply_output_post_processing(SOURCE, step_edge=0.0)
    assert "step(vec3(0.0000), fragColor.rgb)" in code
    assert "abs(" not in code


def test_without_entry_function():
    """Test that sources without mainImage are left alone."""
    assert apply_output_post_processing("float f() { return 1.0; }", "soft") is None


def test_unterminated_entry_function():
    """Test that a missing closing brace leaves nothing to patch."""
    source = "void mainImage(out vec4 fragColor, in vec2 fragCoord) {\n  fragColor = vec4(1.0);"
    assert apply_output_post_processing(source, "soft") is None


def test_unknown_mode():
    """Test that an unknown mode is a caller error."""
    with pytest.raises(ShaderDebugError, match="Unknown normalize mode"):
        apply_output_post_processing(SOURCE, "loud")
