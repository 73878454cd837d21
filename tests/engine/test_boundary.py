"""Tests for function boundary resolution."""

import pytest

from glsl_debug.engine.boundary import (
    find_enclosing_function,
    find_entry_function,
    find_function,
)

MULTILINE_SIGNATURE = [
    "float f(",  # 0
    "  vec2 p,",  # 1
    "  out float r)",  # 2
    "{",  # 3
    "  r = 1.0;",  # 4
    "  return p.x;",  # 5
    "}",  # 6
]


def test_line_inside_entry_function(circle_lines):
    """Test that a body line resolves to the entry function."""
    boundary = find_enclosing_function(circle_lines, 8)
    assert boundary.name == "mainImage"
    assert boundary.start_line == 4
    assert boundary.body_line == 4
    assert boundary.end_line == 14
    assert boundary.return_type == "void"


def test_entry_parameters(circle_lines):
    """Test that qualifiers and positions are parsed from the signature."""
    boundary = find_enclosing_function(circle_lines, 8)
    params = [(p.name, p.type_name, p.qualifier, p.index) for p in boundary.parameters]
    assert params == [
        ("fragColor", "vec4", "out", 0),
        ("fragCoord", "vec2", "in", 1),
    ]


def test_line_inside_helper(circle_lines):
    """Test that a helper's body resolves to the helper."""
    boundary = find_enclosing_function(circle_lines, 1)
    assert boundary.name == "sdCircle"
    assert boundary.return_type == "float"
    assert boundary.end_line == 2
    assert [p.name for p in boundary.parameters] == ["p", "r"]
    assert boundary.parameters[0].qualifier is None


@pytest.mark.parametrize("line", [0, 4])
def test_declaration_line_resolves_to_its_function(circle_lines, line):
    """Test that a declaration line belongs to the function it declares."""
    boundary = find_enclosing_function(circle_lines, line)
    assert boundary.start_line == line


def test_line_between_functions_is_top_level(circle_lines):
    """Test that a line after a closed function is at top level."""
    boundary = find_enclosing_function(circle_lines, 3)
    assert boundary.is_top_level
    assert boundary.name is None


def test_line_after_closed_sibling_block(circle_lines):
    """Test that a closed if/else block does not end the function."""
    boundary = find_enclosing_function(circle_lines, 12)
    assert boundary.name == "mainImage"


def test_multiline_signature():
    """Test parameters spread over several lines with the brace below."""
    boundary = find_enclosing_function(MULTILINE_SIGNATURE, 4)
    assert boundary.name == "f"
    assert boundary.body_line == 3
    assert boundary.end_line == 6
    assert [(p.name, p.qualifier) for p in boundary.parameters] == [
        ("p", None),
        ("r", "out"),
    ]


def test_line_inside_multiline_signature():
    """Test that a parameter line resolves to its function."""
    boundary = find_enclosing_function(MULTILINE_SIGNATURE, 1)
    assert boundary.name == "f"


def test_prototype_is_skipped():
    """Test that forward declarations are never treated as definitions."""
    lines = [
        "float f(vec2 p);",
        "void mainImage(out vec4 fragColor, in vec2 fragCoord) {",
        "  fragColor = vec4(f(fragCoord));",
        "}",
        "float f(vec2 p) {",
        "  return p.x;",
        "}",
    ]
    assert find_function(lines, "f").start_line == 4
    assert find_enclosing_function(lines, 2).name == "mainImage"


def test_unterminated_body_extends_to_end():
    """Test a function still being typed."""
    lines = [
        "void mainImage(out vec4 fragColor, in vec2 fragCoord) {",
        "  vec2 uv = fragCoord;",
    ]
    boundary = find_enclosing_function(lines, 1)
    assert boundary.name == "mainImage"
    assert boundary.end_line == 1


def test_find_entry_function(helpers_lines):
    """Test locating mainImage among helpers."""
    entry = find_entry_function(helpers_lines)
    assert entry is not None
    assert entry.start_line == 23
    assert entry.end_line == 27


def test_find_entry_function_missing():
    """Test a source without mainImage."""
    assert find_entry_function(["float f() {", "  return 1.0;", "}"]) is None
