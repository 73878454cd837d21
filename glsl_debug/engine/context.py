"""Function context queries for override-editing UIs."""

from loguru import logger

from glsl_debug.engine.boundary import find_enclosing_function
from glsl_debug.engine.constants import ENTRY_FUNCTION
from glsl_debug.engine.defaults import parameter_info
from glsl_debug.engine.errors import ShaderDebugError
from glsl_debug.engine.loops import scan_loops
from glsl_debug.engine.models import DebugFunctionContext


def extract_function_context(
    source: str,
    line: int,
    loop_max_iterations: dict[int, int] | None = None,
) -> DebugFunctionContext | None:
    """Describe the function around a line.

    Parameters come with their precomputed uv and default expressions;
    `out` parameters and parameters of unknown type are left out. Loops are
    listed from the function start through the line, or through the whole
    function when the line is part of the signature.

    Args:
        source: Complete shader source
        line: 0-based query line
        loop_max_iterations: Recorded caps to annotate loops with

    Returns:
        The context, or None when no function encloses the line

    Raises:
        ShaderDebugError: If the line index is negative
    """
    if line < 0:
        raise ShaderDebugError("Line index must not be negative", line)
    lines = source.split("\n")
    if line >= len(lines):
        return None

    boundary = find_enclosing_function(lines, line)
    if boundary.is_top_level:
        return None

    signature_end = max(boundary.body_line, boundary.start_line)
    last_line = boundary.end_line if line <= signature_end else line
    loops = scan_loops(lines, boundary.start_line, last_line, loop_max_iterations)
    parameters = [
        parameter_info(param)
        for param in boundary.parameters
        if param.qualifier != "out" and param.glsl_type is not None
    ]
    logger.debug(
        f"Context for line {line}: {boundary.name} with "
        f"{len(parameters)} parameters and {len(loops)} loops"
    )
    return DebugFunctionContext(
        function_name=boundary.name,
        return_type=boundary.return_type or "void",
        parameters=parameters,
        is_function=boundary.name != ENTRY_FUNCTION,
        loops=loops,
    )
