"""
Debug program assembly.

Each generation path turns a resolved request into a complete Shadertoy
program whose entry function writes the debugged value to the output color.
The paths are selected from whether the line has a target and what kind of
function encloses it.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from loguru import logger

from glsl_debug.engine.boundary import find_entry_function
from glsl_debug.engine.call_site import resolve_call_arguments
from glsl_debug.engine.constants import (
    ENTRY_FUNCTION,
    ENTRY_SIGNATURE,
    FALLBACK_RESULT_BINDING,
    FUNCTION_DECL_RE,
    OUTPUT_COLOR,
    RESULT_BINDING,
    SHADOW_BINDING,
)
from glsl_debug.engine.glsl_types import GlslType
from glsl_debug.engine.loops import cap_loops, containing_loops, scan_loops
from glsl_debug.engine.models import (
    DebugTarget,
    FunctionBoundary,
    GenerationPath,
    NormalizeMode,
    SourceStatement,
)
from glsl_debug.engine.post_processing import (
    abs_normalize,
    soft_normalize,
    step_statement,
)
from glsl_debug.engine.text_utils import brace_delta, code_of, strip_comment
from glsl_debug.engine.truncation import TruncationPlan, truncate_body

_RESULT_DECLARATION_RE = re.compile(rf"\b\w+\s+{RESULT_BINDING}\s*[=;]")


@dataclass
class DebugRequest:
    """Everything a generation path needs to build a program.

    Attributes:
        lines: Source lines
        boundary: Function enclosing the query line
        statement: Statement around the query line
        target: Detected debug target, None when the line has none
        loop_max_iterations: Loop caps keyed by discovery index
        custom_parameters: Argument overrides keyed by signature position
        normalize_mode: Normalization for the visualized value
        step_edge: Threshold for the visualized value
    """

    lines: list[str]
    boundary: FunctionBoundary
    statement: SourceStatement
    target: DebugTarget | None = None
    loop_max_iterations: dict[int, int] = field(default_factory=dict)
    custom_parameters: dict[int, str] = field(default_factory=dict)
    normalize_mode: NormalizeMode = NormalizeMode.OFF
    step_edge: float | None = None


def _plain_visualization(glsl_type: GlslType | None, expr: str) -> str:
    if glsl_type is GlslType.FLOAT:
        return (
            f"  {OUTPUT_COLOR} = vec4(vec3({expr}), 1.0);"
            " // Debug: visualize float as grayscale"
        )
    if glsl_type is GlslType.INT:
        return (
            f"  {OUTPUT_COLOR} = vec4(vec3(float({expr})), 1.0);"
            " // Debug: visualize int as grayscale"
        )
    if glsl_type is GlslType.BOOL:
        return (
            f"  {OUTPUT_COLOR} = vec4(vec3({expr} ? 1.0 : 0.0), 1.0);"
            " // Debug: visualize bool as black or white"
        )
    if glsl_type is GlslType.VEC2:
        return (
            f"  {OUTPUT_COLOR} = vec4({expr}, 0.0, 1.0);"
            " // Debug: visualize vec2 (RG channels)"
        )
    if glsl_type is GlslType.VEC3:
        return f"  {OUTPUT_COLOR} = vec4({expr}, 1.0); // Debug: visualize vec3 as RGB"
    if glsl_type is GlslType.VEC4:
        return f"  {OUTPUT_COLOR} = {expr}; // Debug: visualize vec4 directly"
    if glsl_type is GlslType.MAT2:
        return (
            f"  {OUTPUT_COLOR} = vec4({expr}[0], {expr}[1]);"
            " // Debug: visualize mat2 as vec4"
        )
    if glsl_type is GlslType.MAT3:
        return (
            f"  {OUTPUT_COLOR} = vec4({expr}[0], 1.0);"
            " // Debug: visualize mat3 first row"
        )
    if glsl_type is GlslType.MAT4:
        return f"  {OUTPUT_COLOR} = {expr}[0]; // Debug: visualize mat4 first row"
    return f"  {OUTPUT_COLOR} = vec4(1.0, 0.0, 1.0, 1.0); // Debug: unknown type"


def _normalized_visualization(
    glsl_type: GlslType, expr: str, normalize_mode: NormalizeMode
) -> str:
    if normalize_mode is NormalizeMode.SOFT:
        normalize = soft_normalize
    else:
        normalize = abs_normalize
    label = f"{normalize_mode.value} normalized"
    if glsl_type is GlslType.FLOAT:
        value = normalize(glsl_type, expr)
        return f"  {OUTPUT_COLOR} = vec4(vec3({value}), 1.0); // Debug: {label} float"
    if glsl_type is GlslType.VEC2:
        value = normalize(glsl_type, expr)
        return f"  {OUTPUT_COLOR} = vec4({value}, 0.0, 1.0); // Debug: {label} vec2"
    if glsl_type is GlslType.VEC3:
        value = normalize(glsl_type, expr)
        return f"  {OUTPUT_COLOR} = vec4({value}, 1.0); // Debug: {label} vec3"
    value = normalize(GlslType.VEC3, f"{expr}.rgb")
    return f"  {OUTPUT_COLOR} = vec4({value}, 1.0); // Debug: {label} vec4"


def visualization_statement(
    glsl_type: GlslType | None,
    expr: str,
    normalize_mode: NormalizeMode = NormalizeMode.OFF,
    step_edge: float | None = None,
) -> str:
    """Output-color assignment showing a typed value.

    Args:
        glsl_type: Type of the value, None when unknown
        expr: Expression to visualize
        normalize_mode: Normalization for float and vector values
        step_edge: Threshold applied after normalization, None to skip

    Returns:
        One or two statements, newline separated
    """
    normalizable = (GlslType.FLOAT, GlslType.VEC2, GlslType.VEC3, GlslType.VEC4)
    if normalize_mode is not NormalizeMode.OFF and glsl_type in normalizable:
        statement = _normalized_visualization(glsl_type, expr, normalize_mode)
    else:
        statement = _plain_visualization(glsl_type, expr)
    if step_edge is not None:
        statement += "\n" + step_statement(step_edge)
    return statement


def _close_braces(function_lines: list[str]) -> list[str]:
    open_blocks = sum(brace_delta(line) for line in function_lines)
    return ["}"] * max(open_blocks, 0)


def _preceding_source(lines: list[str], boundary: FunctionBoundary) -> list[str]:
    """Everything above a helper, without the entry function."""
    entry = find_entry_function(lines)
    if entry is not None and entry.end_line < boundary.start_line:
        between = lines[entry.end_line + 1 : boundary.start_line]
        return lines[: entry.start_line] + between
    return lines[: boundary.start_line]


def _rewrite_return_type(line: str, glsl_type: GlslType) -> str:
    code = strip_comment(line)
    match = FUNCTION_DECL_RE.match(code)
    if match is None or match.group(1) == glsl_type.value:
        return line
    return code[: match.start(1)] + glsl_type.value + code[match.end(1) :].rstrip()


def _truncated_function(
    request: DebugRequest, in_helper: bool
) -> tuple[list[str], str]:
    """Truncated copy of the enclosing function and the name to visualize."""
    lines = request.lines
    boundary = request.boundary
    target = request.target
    loops = scan_loops(lines, boundary.start_line, target.end_line)
    containing = containing_loops(loops, target.start_line)
    shadow_loop = containing[0] if containing else None
    last_line = shadow_loop.end_line if shadow_loop else target.end_line

    signature = lines[boundary.start_line : boundary.body_line + 1]
    if in_helper:
        signature[0] = _rewrite_return_type(signature[0], target.type)
    plan = TruncationPlan(
        first_line=boundary.body_line + 1,
        last_line=last_line,
        target=target,
        shadow_loop=shadow_loop,
        in_helper=in_helper,
    )
    function_lines = cap_loops(
        signature + truncate_body(lines, plan), request.loop_max_iterations
    )
    return function_lines, SHADOW_BINDING if shadow_loop else target.name


def _entry_call(
    request: DebugRequest, glsl_type: GlslType | None
) -> list[str]:
    """Fresh entry function calling the helper and showing its result."""
    boundary = request.boundary
    call = resolve_call_arguments(
        request.lines, boundary, request.custom_parameters
    )
    binding = RESULT_BINDING
    if any(_RESULT_DECLARATION_RE.search(code_of(line)) for line in call.setup):
        binding = FALLBACK_RESULT_BINDING
    visualization = visualization_statement(
        glsl_type, binding, request.normalize_mode, request.step_edge
    )
    return [
        ENTRY_SIGNATURE,
        *call.setup,
        f"  {glsl_type} {binding} = {boundary.name}({', '.join(call.args)});",
        *visualization.split("\n"),
        "}",
    ]


def generate_entry_truncation(request: DebugRequest) -> str | None:
    """Cut the entry function at the debug statement and show the target."""
    target = request.target
    function_lines, shown = _truncated_function(request, in_helper=False)
    visualization = visualization_statement(
        target.type, shown, request.normalize_mode, request.step_edge
    )
    function_lines += visualization.split("\n")
    function_lines += _close_braces(function_lines)
    preceding = request.lines[: request.boundary.start_line]
    return "\n".join(preceding + function_lines)


def generate_helper_target(request: DebugRequest) -> str | None:
    """Return the target from a truncated helper and show it from a fresh entry."""
    target = request.target
    function_lines, shown = _truncated_function(request, in_helper=True)
    function_lines.append(f"  return {shown};")
    function_lines += _close_braces(function_lines)
    preceding = _preceding_source(request.lines, request.boundary)
    entry = _entry_call(request, target.type)
    return "\n".join(preceding + function_lines + [""] + entry)


def generate_full_function(request: DebugRequest) -> str | None:
    """Run a whole non-void helper and show its return value."""
    boundary = request.boundary
    return_type = GlslType.parse(boundary.return_type)
    if return_type is None or boundary.end_line < 0:
        return None
    function_lines = cap_loops(
        request.lines[boundary.start_line : boundary.end_line + 1],
        request.loop_max_iterations,
    )
    preceding = _preceding_source(request.lines, boundary)
    entry = _entry_call(request, return_type)
    return "\n".join(preceding + function_lines + [""] + entry)


def generate_one_liner(request: DebugRequest) -> str | None:
    """Wrap a top-level statement in a minimal entry function."""
    target = request.target
    visualization = visualization_statement(
        target.type, target.name, request.normalize_mode, request.step_edge
    )
    return "\n".join(
        [
            ENTRY_SIGNATURE,
            f"  {request.statement.text.strip()}",
            *visualization.split("\n"),
            "}",
        ]
    )


GENERATORS: dict[GenerationPath, Callable[[DebugRequest], str | None]] = {
    GenerationPath.ENTRY_TRUNCATION: generate_entry_truncation,
    GenerationPath.HELPER_TARGET: generate_helper_target,
    GenerationPath.HELPER_FULL_FUNCTION: generate_full_function,
    GenerationPath.ONE_LINER: generate_one_liner,
}


def select_path(
    boundary: FunctionBoundary, target: DebugTarget | None
) -> GenerationPath | None:
    """Pick the generation path for a (target, enclosing function) pair.

    Returns:
        The path to run, or None when the combination has nothing to show
    """
    if boundary.is_top_level:
        return GenerationPath.ONE_LINER if target is not None else None
    if boundary.name == ENTRY_FUNCTION:
        return GenerationPath.ENTRY_TRUNCATION if target is not None else None
    if target is not None:
        return GenerationPath.HELPER_TARGET
    if GlslType.parse(boundary.return_type) is None:
        logger.debug(f"{boundary.name} returns {boundary.return_type}, nothing to show")
        return None
    return GenerationPath.HELPER_FULL_FUNCTION


def generate(request: DebugRequest) -> str | None:
    path = select_path(request.boundary, request.target)
    if path is None:
        return None
    logger.debug(f"Generating debug program via {path.name.lower()}")
    return GENERATORS[path](request)
