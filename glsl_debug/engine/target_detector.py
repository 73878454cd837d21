"""
Debug target detection.

Decides which single value a query line is about by trying a fixed sequence
of patterns against the line's statement: a return, a declaration, a plain
or compound reassignment, then a member or swizzle assignment. The first
trial that matches wins, so detection is deterministic.
"""

from loguru import logger

from glsl_debug.engine.constants import (
    COMPOUND_ASSIGN_RE,
    CONTROL_FLOW_RE,
    FUNCTION_DECL_RE,
    INITIALIZED_DECLARATION_RE,
    MAX_STATEMENT_LINES,
    MEMBER_ASSIGN_RE,
    PLAIN_ASSIGN_RE,
    RETURN_BINDING,
    RETURN_RE,
)
from glsl_debug.engine.glsl_types import GlslType
from glsl_debug.engine.models import DebugTarget, SourceStatement, TargetKind
from glsl_debug.engine.text_utils import code_of, is_statement_complete
from glsl_debug.engine.type_table import VariableTypeTable


def _is_header(code: str) -> bool:
    return bool(
        code.startswith("#")
        or CONTROL_FLOW_RE.match(code)
        or FUNCTION_DECL_RE.match(code)
    )


def gather_statement(lines: list[str], line: int, line_text: str) -> SourceStatement:
    """Join the query line with the neighbours of a multi-line statement.

    The caller-supplied `line_text` stands in for `lines[line]`. Function
    declarations and control-flow headers are never joined.

    Args:
        lines: Source lines
        line: 0-based query line
        line_text: Text of the query line as the user sees it

    Returns:
        The statement text with its first and last source lines
    """
    single = SourceStatement(line_text, line, line)
    current = code_of(line_text)
    if _is_header(current) or not 0 <= line < len(lines):
        return single

    incomplete = not is_statement_complete(line_text)
    previous_incomplete = (
        line > 0
        and not is_statement_complete(lines[line - 1])
        and not _is_header(code_of(lines[line - 1]))
    )
    if not (incomplete or previous_incomplete):
        return single

    start = line
    for index in range(line - 1, max(-1, line - MAX_STATEMENT_LINES - 1), -1):
        if is_statement_complete(lines[index]) or _is_header(code_of(lines[index])):
            break
        start = index

    end = -1
    for index in range(line, min(len(lines), line + MAX_STATEMENT_LINES)):
        code = current if index == line else code_of(lines[index])
        if code.endswith(";"):
            end = index
            break
        if code.endswith(("{", "}")):
            break
    if end < 0:
        return single

    parts = [
        line_text if index == line else lines[index]
        for index in range(start, end + 1)
    ]
    text = " ".join(code_of(part) for part in parts)
    logger.debug(f"Joined multi-line statement {start}-{end}: {text}")
    return SourceStatement(text, start, end)


def detect_target(
    statement: SourceStatement,
    type_table: VariableTypeTable,
    return_type: str | None = None,
) -> DebugTarget | None:
    """Identify the value to visualize for a statement.

    Args:
        statement: Statement around the query line
        type_table: Variable types visible at the line
        return_type: Declared return type of the enclosing function

    Returns:
        The detected target, or None when the line has nothing to show
    """
    code = code_of(statement.text)
    if not code or code.startswith("#"):
        return None

    def target(
        name: str,
        glsl_type: GlslType,
        kind: TargetKind,
        expression: str | None = None,
    ) -> DebugTarget:
        logger.debug(f"Detected {kind.name.lower()} target {name} ({glsl_type})")
        return DebugTarget(
            name=name,
            type=glsl_type,
            kind=kind,
            expression=expression,
            start_line=statement.start_line,
            end_line=statement.end_line,
        )

    returned = RETURN_RE.match(code)
    if returned:
        declared = GlslType.parse(return_type)
        if declared is None:
            return None
        expression = returned.group(1)
        inferred = type_table.get(expression)
        return target(
            RETURN_BINDING, inferred or declared, TargetKind.RETURN, expression
        )

    if CONTROL_FLOW_RE.match(code) or FUNCTION_DECL_RE.match(code):
        return None

    declaration = INITIALIZED_DECLARATION_RE.search(code)
    if declaration:
        glsl_type = GlslType.parse(declaration.group(1))
        if glsl_type is not None:
            return target(declaration.group(2), glsl_type, TargetKind.DECLARATION)

    for match in COMPOUND_ASSIGN_RE.finditer(code):
        glsl_type = type_table.get(match.group(1))
        if glsl_type is not None:
            return target(match.group(1), glsl_type, TargetKind.ASSIGNMENT)

    plain = PLAIN_ASSIGN_RE.match(code)
    if plain and plain.group(1) in type_table:
        name = plain.group(1)
        return target(name, type_table[name], TargetKind.ASSIGNMENT)

    for match in MEMBER_ASSIGN_RE.finditer(code):
        glsl_type = type_table.get(match.group(1))
        if glsl_type is not None:
            return target(match.group(1), glsl_type, TargetKind.MEMBER_ASSIGNMENT)

    return None
