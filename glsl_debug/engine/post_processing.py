"""
Output post-processing.

Normalization remaps signed values into the displayable range, the step
threshold binarizes the image against an edge value. Both are available as
expression helpers for the visualization statement and as a whole-program
rewrite of a finished shader's output color.
"""

import re

from loguru import logger

from glsl_debug.engine.constants import ENTRY_FUNCTION, OUTPUT_COLOR
from glsl_debug.engine.glsl_types import GlslType
from glsl_debug.engine.models import NormalizeMode
from glsl_debug.engine.text_utils import find_block_end

_ENTRY_RE = re.compile(rf"void\s+{ENTRY_FUNCTION}\s*\(")


def format_edge(step_edge: float) -> str:
    return f"{step_edge:.4f}"


def soft_normalize(glsl_type: GlslType, expr: str) -> str:
    """Map (-inf, inf) to (0, 1) with zero at mid-gray."""
    if glsl_type is GlslType.FLOAT:
        return f"({expr} / (abs({expr}) + 1.0) * 0.5 + 0.5)"
    return f"({expr} / (abs({expr}) + {glsl_type}(1.0)) * 0.5 + 0.5)"


def abs_normalize(glsl_type: GlslType, expr: str) -> str:
    """Map magnitudes to [0, 1) regardless of sign."""
    if glsl_type is GlslType.FLOAT:
        return f"(abs({expr}) / (abs({expr}) + 1.0))"
    return f"(abs({expr}) / (abs({expr}) + {glsl_type}(1.0)))"


def step_statement(step_edge: float) -> str:
    edge = format_edge(step_edge)
    return (
        f"  {OUTPUT_COLOR} = vec4(step(vec3({edge}), {OUTPUT_COLOR}.rgb), 1.0);"
        " // Debug: step threshold"
    )


def apply_output_post_processing(
    source: str,
    normalize_mode: NormalizeMode | str = NormalizeMode.OFF,
    step_edge: float | None = None,
) -> str | None:
    """Rewrite a finished program's output color in place.

    The statements are inserted right before the closing brace of the entry
    function, so they act on whatever color the program produced.

    Args:
        source: Complete shader source
        normalize_mode: Normalization applied to the RGB channels
        step_edge: Threshold to binarize against, None to skip

    Returns:
        The rewritten source, or None when there is nothing to apply or no
        entry function to apply it to
    """
    mode = NormalizeMode.coerce(normalize_mode)
    if mode is NormalizeMode.OFF and step_edge is None:
        return None

    lines = source.split("\n")
    start = next(
        (index for index, line in enumerate(lines) if _ENTRY_RE.search(line)), -1
    )
    if start < 0:
        return None
    end = find_block_end(lines, start)
    if end < 0:
        return None

    inserted: list[str] = []
    if mode is NormalizeMode.SOFT:
        inserted.append(
            f"  {OUTPUT_COLOR}.rgb = {OUTPUT_COLOR}.rgb / "
            f"(abs({OUTPUT_COLOR}.rgb) + vec3(1.0)) * 0.5 + 0.5;"
        )
    elif mode is NormalizeMode.ABS:
        inserted.append(
            f"  {OUTPUT_COLOR}.rgb = abs({OUTPUT_COLOR}.rgb) / "
            f"(abs({OUTPUT_COLOR}.rgb) + vec3(1.0));"
        )
    if step_edge is not None:
        edge = format_edge(step_edge)
        inserted.append(
            f"  {OUTPUT_COLOR} = vec4(step(vec3({edge}), {OUTPUT_COLOR}.rgb), 1.0);"
        )

    logger.debug(f"Post-processing output with mode={mode.value} step={step_edge}")
    return "\n".join(lines[:end] + inserted + lines[end:])
