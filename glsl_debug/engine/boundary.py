"""
Function boundary resolution.

Finds which function, if any, encloses a source line by counting braces
backwards from the line, and parses the signature of the function found.
Resolution is function-granular: lines inside nested blocks resolve to the
function that contains the blocks.
"""

import re

from loguru import logger

from glsl_debug.engine.constants import (
    ENTRY_FUNCTION,
    FUNCTION_DECL_RE,
    MAX_STATEMENT_LINES,
    PARAMETER_RE,
)
from glsl_debug.engine.models import FunctionBoundary, FunctionParameter
from glsl_debug.engine.text_utils import find_block_end, split_arguments, strip_comment


def _parse_signature(
    lines: list[str], start: int, match: re.Match[str]
) -> FunctionBoundary:
    """Parse the declaration at `start` into a boundary (end line unresolved).

    Args:
        lines: Source lines
        start: Line holding `type name(`
        match: FUNCTION_DECL_RE match for that line

    Returns:
        Boundary with name, return type, parameters and body line filled in
    """
    boundary = FunctionBoundary(
        name=match.group(2), start_line=start, return_type=match.group(1)
    )
    depth = 0
    params_text: list[str] = []
    close_line = -1
    close_col = -1
    last = min(len(lines), start + MAX_STATEMENT_LINES)
    for index in range(start, last):
        code = strip_comment(lines[index])
        begin = match.end() - 1 if index == start else 0
        for col in range(begin, len(code)):
            char = code[col]
            if char == "(":
                depth += 1
                if depth == 1:
                    continue
            elif char == ")":
                depth -= 1
                if depth == 0:
                    close_line, close_col = index, col
                    break
            params_text.append(char)
        if close_line >= 0:
            break
        params_text.append(" ")

    if close_line < 0:
        return boundary

    for position, piece in enumerate(split_arguments("".join(params_text))):
        param = PARAMETER_RE.match(piece.strip())
        if param and piece.strip() != "void":
            boundary.parameters.append(
                FunctionParameter(
                    name=param.group(3),
                    type_name=param.group(2),
                    qualifier=param.group(1),
                    index=position,
                )
            )

    rest = strip_comment(lines[close_line])[close_col + 1 :]
    if rest.strip().startswith("{"):
        boundary.body_line = close_line
        body_col = close_col + 1 + rest.index("{")
    else:
        if rest.strip():
            return boundary
        body_col = -1
        for index in range(close_line + 1, len(lines)):
            code = strip_comment(lines[index])
            if not code.strip():
                continue
            if code.strip().startswith("{"):
                boundary.body_line = index
                body_col = code.index("{")
            break
        if body_col < 0:
            return boundary

    boundary.end_line = find_block_end(lines, boundary.body_line, body_col)
    if boundary.end_line < 0:
        # Unterminated body while the user is still typing
        boundary.end_line = len(lines) - 1
    return boundary


def _signature_end(boundary: FunctionBoundary) -> int:
    return boundary.body_line if boundary.body_line >= 0 else boundary.start_line


def find_enclosing_function(lines: list[str], line: int) -> FunctionBoundary:
    """Resolve the function enclosing a line.

    Walking backwards, an opening brace decrements the depth and a closing
    brace increments it, so the scan sits at negative depth once it is inside
    an enclosing scope. A declaration seen at negative depth encloses the
    line. A declaration seen at depth zero encloses it only when the line is
    part of that declaration's signature; otherwise it is a sibling function
    that has already closed and the line is at top level.

    Args:
        lines: Source lines
        line: 0-based query line

    Returns:
        The enclosing boundary, or a boundary with name None at top level
    """
    depth = 0
    for index in range(min(line, len(lines) - 1), -1, -1):
        code = strip_comment(lines[index])
        depth += code.count("}") - code.count("{")
        match = FUNCTION_DECL_RE.match(code)
        if match is None:
            continue

        boundary = _parse_signature(lines, index, match)
        if boundary.body_line < 0:
            # Prototype, no body to enclose anything
            continue
        if depth < 0 or (depth == 0 and _signature_end(boundary) >= line):
            logger.debug(
                f"Line {line} resolved to {boundary.name} "
                f"({boundary.start_line}-{boundary.end_line})"
            )
            return boundary
        if depth == 0:
            break

    logger.debug(f"Line {line} is at top level")
    return FunctionBoundary(name=None)


def find_function(lines: list[str], name: str) -> FunctionBoundary | None:
    """Locate the first definition of a function by name."""
    for index, line in enumerate(lines):
        match = FUNCTION_DECL_RE.match(strip_comment(line))
        if match and match.group(2) == name:
            boundary = _parse_signature(lines, index, match)
            if boundary.body_line >= 0:
                return boundary
    return None


def find_entry_function(lines: list[str]) -> FunctionBoundary | None:
    """Locate the program's entry function."""
    return find_function(lines, ENTRY_FUNCTION)
