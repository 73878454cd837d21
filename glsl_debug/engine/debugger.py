"""
Debug program entry point.

Resolves the function around a query line, detects the value on it and
hands the result to the matching generation path. Every "nothing to show"
outcome is a None return; exceptions are reserved for invalid arguments.
"""

from loguru import logger

from glsl_debug.engine.boundary import find_enclosing_function
from glsl_debug.engine.code_generator import DebugRequest, generate
from glsl_debug.engine.errors import ShaderDebugError
from glsl_debug.engine.models import NormalizeMode
from glsl_debug.engine.target_detector import detect_target, gather_statement
from glsl_debug.engine.type_table import build_type_table


def modify_shader_for_debugging(
    source: str,
    debug_line: int,
    line_text: str,
    loop_max_iterations: dict[int, int] | None = None,
    custom_parameters: dict[int, str] | None = None,
    normalize_mode: NormalizeMode | str = NormalizeMode.OFF,
    step_edge: float | None = None,
) -> str | None:
    """Build a program that shows the value computed on a source line.

    Args:
        source: Complete shader source
        debug_line: 0-based line the user is looking at
        line_text: Text of that line as the editor shows it
        loop_max_iterations: Iteration caps keyed by loop discovery index
        custom_parameters: Helper argument overrides keyed by position
        normalize_mode: "off", "soft" or "abs"
        step_edge: Threshold to binarize the shown value, None to skip

    Returns:
        The debug program, or None when the line has nothing to visualize

    Raises:
        ShaderDebugError: On a negative line, a negative loop cap or an
            unknown normalize mode
    """
    mode = NormalizeMode.coerce(normalize_mode)
    if debug_line < 0:
        raise ShaderDebugError("Debug line must not be negative", debug_line)
    caps = dict(loop_max_iterations or {})
    for loop_index, cap in caps.items():
        if cap < 0:
            raise ShaderDebugError(f"Loop {loop_index} cap must not be negative")

    lines = source.split("\n")
    if debug_line >= len(lines):
        logger.debug(f"Line {debug_line} is past the end of the source")
        return None

    boundary = find_enclosing_function(lines, debug_line)
    statement = gather_statement(lines, debug_line, line_text)
    type_table = build_type_table(lines, statement.end_line, boundary)
    target = detect_target(statement, type_table, boundary.return_type)

    request = DebugRequest(
        lines=lines,
        boundary=boundary,
        statement=statement,
        target=target,
        loop_max_iterations=caps,
        custom_parameters=dict(custom_parameters or {}),
        normalize_mode=mode,
        step_edge=step_edge,
    )
    return generate(request)
