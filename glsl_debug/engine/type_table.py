"""
Flow-insensitive variable type table.

Maps identifiers to their declared GLSL type by scanning declarations up to
a query line. Later declarations overwrite earlier ones (last writer wins),
which is deliberately not true block scoping.
"""

from glsl_debug.engine.constants import DECLARATION_RE
from glsl_debug.engine.glsl_types import GlslType
from glsl_debug.engine.models import FunctionBoundary
from glsl_debug.engine.text_utils import strip_comment

VariableTypeTable = dict[str, GlslType]


def _scan_declarations(table: VariableTypeTable, line: str) -> None:
    for match in DECLARATION_RE.finditer(strip_comment(line)):
        glsl_type = GlslType.parse(match.group(1))
        if glsl_type is not None:
            table[match.group(2)] = glsl_type


def build_type_table(
    lines: list[str], up_to_line: int, boundary: FunctionBoundary
) -> VariableTypeTable:
    """Collect variable types visible at a line.

    Top-level declarations above the function come first, then the
    function's parameters (qualifiers stripped), then every declaration in
    the function through `up_to_line`. At top level the whole file up to the
    line is scanned.

    Args:
        lines: Source lines
        up_to_line: Last line to scan, inclusive
        boundary: Enclosing function of the query line

    Returns:
        Mapping from identifier to type
    """
    table: VariableTypeTable = {}
    last = min(up_to_line, len(lines) - 1)

    if boundary.is_top_level:
        for index in range(0, last + 1):
            _scan_declarations(table, lines[index])
        return table

    depth = 0
    for index in range(0, boundary.start_line):
        if depth == 0:
            _scan_declarations(table, lines[index])
        code = strip_comment(lines[index])
        depth = max(0, depth + code.count("{") - code.count("}"))

    for param in boundary.parameters:
        glsl_type = param.glsl_type
        if glsl_type is not None:
            table[param.name] = glsl_type

    body_start = max(boundary.body_line, boundary.start_line)
    for index in range(body_start, last + 1):
        if index == boundary.body_line:
            # Signature text may precede the brace on the same line
            code = strip_comment(lines[index])
            _scan_declarations(table, code[code.find("{") + 1 :])
            continue
        _scan_declarations(table, lines[index])
    return table
