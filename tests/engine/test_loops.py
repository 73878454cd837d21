"""Tests for loop scanning and capping."""

from glsl_debug.engine.loops import (
    cap_loops,
    containing_loops,
    loop_end,
    loop_header,
    scan_loops,
)


def test_scan_loops_in_order(loop_lines):
    """Test that loops are indexed by discovery order within a function."""
    loops = scan_loops(loop_lines, 9, 18)
    assert len(loops) == 1
    loop = loops[0]
    assert loop.loop_index == 0
    assert loop.line_number == 12
    assert loop.end_line == 15
    assert loop.loop_header == "for (int i = 0; i < 100; i++)"
    assert loop.max_iter is None


def test_scan_stops_at_boundary_line(loop_lines):
    """Test that loops after the last line are not collected."""
    assert scan_loops(loop_lines, 9, 11) == []


def test_scan_annotates_caps(loop_lines):
    """Test that recorded caps are attached by index."""
    loops = scan_loops(loop_lines, 0, 7, {0: 3})
    assert loops[0].max_iter == 3


def test_containing_loops(loop_lines):
    """Test that only loops whose body holds the line are returned."""
    loops = scan_loops(loop_lines, 9, 18)
    assert containing_loops(loops, 14) == loops
    assert containing_loops(loops, 12) == []
    assert containing_loops(loops, 16) == []


def test_loop_end_variants():
    """Test closing-line detection for brace placements and single bodies."""
    lines = [
        "for (int i = 0; i < 4; i++) {",  # 0
        "  a += 1.0;",  # 1
        "}",  # 2
        "for (int i = 0; i < 4; i++)",  # 3
        "{",  # 4
        "  a += 1.0;",  # 5
        "}",  # 6
        "for (int i = 0; i < 4; i++)",  # 7
        "  a += 1.0;",  # 8
        "for (int i = 0; i < 4; i++) a += 1.0;",  # 9
    ]
    assert loop_end(lines, 0) == 2
    assert loop_end(lines, 3) == 6
    assert loop_end(lines, 7) == 8
    assert loop_end(lines, 9) == 9


def test_loop_header_strips_body():
    """Test that only the header part of a loop line is reported."""
    assert loop_header("  for (int i = 0; i < 4; i++) { // walk") == (
        "for (int i = 0; i < 4; i++)"
    )


def test_cap_single_loop():
    """Test that a capped loop gets one counter and one guard."""
    lines = [
        "void f() {",
        "  for (int i = 0; i < 100; i++) {",
        "    a += 1.0;",
        "  }",
        "}",
    ]
    result = cap_loops(lines, {0: 15})
    code = "\n".join(result)
    assert code.count("int _dbgIter0 = 0;") == 1
    assert code.count("if (++_dbgIter0 > 15) break;") == 1
    assert result[1] == "  int _dbgIter0 = 0;"
    assert result[2] == lines[1]
    assert result[3] == "    if (++_dbgIter0 > 15) break;"


def test_uncapped_loops_untouched():
    """Test that an empty cap map leaves the lines as they are."""
    lines = ["for (int i = 0; i < 4; i++) {", "}"]
    assert cap_loops(lines, {}) == lines


def test_cap_only_selected_loop():
    """Test that indices select loops in order of appearance."""
    lines = [
        "void f() {",
        "  for (int i = 0; i < 4; i++) {",
        "  }",
        "  for (int j = 0; j < 8; j++) {",
        "  }",
        "}",
    ]
    code = "\n".join(cap_loops(lines, {1: 2}))
    assert "_dbgIter0" not in code
    assert "int _dbgIter1 = 0;" in code
    assert "if (++_dbgIter1 > 2) break;" in code


def test_cap_brace_on_next_line():
    """Test that the guard goes inside a block opened on the next line."""
    lines = [
        "for (int i = 0; i < 4; i++)",
        "{",
        "  a += 1.0;",
        "}",
    ]
    result = cap_loops(lines, {0: 1})
    assert result == [
        "int _dbgIter0 = 0;",
        "for (int i = 0; i < 4; i++)",
        "{",
        "  if (++_dbgIter0 > 1) break;",
        "  a += 1.0;",
        "}",
    ]


def test_cap_braceless_body():
    """Test that a body without braces is wrapped so the guard fits."""
    lines = [
        "for (int i = 0; i < 4; i++)",
        "  a += 1.0;",
        "b = a;",
    ]
    result = cap_loops(lines, {0: 2})
    assert result == [
        "int _dbgIter0 = 0;",
        "for (int i = 0; i < 4; i++) {",
        "  if (++_dbgIter0 > 2) break;",
        "  a += 1.0;",
        "}",
        "b = a;",
    ]


def test_cap_same_line_body():
    """Test a loop whose whole body sits on the header line."""
    lines = ["  for (int i = 0; i < 4; i++) a += 1.0;"]
    result = cap_loops(lines, {0: 3})
    assert result == [
        "  int _dbgIter0 = 0;",
        "  for (int i = 0; i < 4; i++) { if (++_dbgIter0 > 3) break; a += 1.0; }",
    ]
    assert "\n".join(result).count("{") == "\n".join(result).count("}")
