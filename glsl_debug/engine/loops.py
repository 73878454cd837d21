"""
Loop scanning and iteration capping.

Loops are identified by their 0-based discovery order inside a function.
Capping keeps the loop's own condition and step and bounds it with an
injected counter and guard:

    int _dbgIter0 = 0;
    for (int i = 0; i < 100; i++) {
      if (++_dbgIter0 > 15) break;
      ...
"""

from collections import defaultdict

from glsl_debug.engine.constants import FOR_RE, LOOP_COUNTER_PREFIX
from glsl_debug.engine.models import DebugLoopInfo
from glsl_debug.engine.text_utils import (
    code_of,
    find_block_end,
    find_matching_paren,
    indent_of,
    strip_comment,
)


def _header_close(code: str) -> int:
    match = FOR_RE.match(code)
    if match is None:
        return -1
    return find_matching_paren(code, match.end() - 1)


def _next_code_line(lines: list[str], after: int) -> int:
    for index in range(after + 1, len(lines)):
        if code_of(lines[index]):
            return index
    return -1


def _statement_end(lines: list[str], line: int) -> int:
    """Last line of the statement or block starting at `line`."""
    code = code_of(lines[line])
    if FOR_RE.match(code):
        return loop_end(lines, line)
    if "{" in code:
        end = find_block_end(lines, line)
        return end if end >= 0 else len(lines) - 1
    for index in range(line, len(lines)):
        if code_of(lines[index]).endswith(";"):
            return index
    return line


def loop_end(lines: list[str], header_line: int) -> int:
    """Line of the closing brace (or single body statement) of a loop.

    Args:
        lines: Source lines
        header_line: Line holding the `for (` header

    Returns:
        Last line belonging to the loop
    """
    code = strip_comment(lines[header_line])
    close = _header_close(code)
    if close < 0:
        end = find_block_end(lines, header_line)
        return end if end >= 0 else header_line

    rest = code[close + 1 :].strip()
    if rest.startswith("{"):
        end = find_block_end(lines, header_line, close + 1)
        return end if end >= 0 else len(lines) - 1
    if rest:
        return header_line

    body = _next_code_line(lines, header_line)
    if body < 0:
        return header_line
    if code_of(lines[body]).startswith("{"):
        end = find_block_end(lines, body)
        return end if end >= 0 else len(lines) - 1
    return _statement_end(lines, body)


def loop_header(line: str) -> str:
    """Header text of a loop line, e.g. "for (int i = 0; i < 4; i++)"."""
    code = code_of(line)
    close = _header_close(code)
    return code[: close + 1] if close >= 0 else code


def scan_loops(
    lines: list[str],
    function_start: int,
    last_line: int,
    loop_max_iterations: dict[int, int] | None = None,
) -> list[DebugLoopInfo]:
    """Find `for` loops between a function's start and a boundary line.

    Args:
        lines: Source lines
        function_start: Line of the function declaration
        last_line: Last line whose loop headers are collected, inclusive
        loop_max_iterations: Caps to annotate loops with, keyed by index

    Returns:
        Loops in discovery order
    """
    caps = loop_max_iterations or {}
    loops: list[DebugLoopInfo] = []
    for index in range(function_start + 1, min(last_line, len(lines) - 1) + 1):
        if not FOR_RE.match(strip_comment(lines[index])):
            continue
        loop_index = len(loops)
        loops.append(
            DebugLoopInfo(
                loop_index=loop_index,
                line_number=index,
                end_line=loop_end(lines, index),
                loop_header=loop_header(lines[index]),
                max_iter=caps.get(loop_index),
            )
        )
    return loops


def containing_loops(loops: list[DebugLoopInfo], line: int) -> list[DebugLoopInfo]:
    """Loops whose body holds `line`, outermost first."""
    return [loop for loop in loops if loop.contains(line)]


def cap_loops(lines: list[str], loop_max_iterations: dict[int, int]) -> list[str]:
    """Inject counters and guards into the capped loops of a function.

    Loops are numbered in the order their headers appear in `lines`, which
    must start at the function declaration. Uncapped loops are left as they
    are. A capped loop without braces gets braces so the guard fits.

    Args:
        lines: Function lines, declaration first
        loop_max_iterations: Maximum iteration count per loop index

    Returns:
        The rewritten lines
    """
    if not loop_max_iterations:
        return list(lines)

    result: list[str] = []
    pending_closes: dict[int, list[str]] = defaultdict(list)
    loop_index = 0

    def emit(line_index: int, text: str) -> None:
        result.append(text)
        for indent in reversed(pending_closes.pop(line_index, [])):
            result.append(f"{indent}}}")

    index = 0
    while index < len(lines):
        line = lines[index]
        code = strip_comment(line)
        if not FOR_RE.match(code):
            emit(index, line)
            index += 1
            continue

        current = loop_index
        loop_index += 1
        cap = loop_max_iterations.get(current)
        close = _header_close(code)
        if cap is None or close < 0:
            emit(index, line)
            index += 1
            continue

        indent = indent_of(line)
        counter = f"{LOOP_COUNTER_PREFIX}{current}"
        guard = f"if (++{counter} > {cap}) break;"
        header = code[: close + 1]
        rest = code[close + 1 :].strip()
        result.append(f"{indent}int {counter} = 0;")

        if rest == "{":
            emit(index, line)
            result.append(f"{indent}  {guard}")
            index += 1
            continue
        if rest.startswith("{"):
            emit(index, f"{header} {{ {guard} {rest[1:].strip()}")
            index += 1
            continue
        if rest:
            emit(index, f"{header} {{ {guard} {rest} }}")
            index += 1
            continue

        body = _next_code_line(lines, index)
        if body < 0:
            emit(index, line)
            index += 1
            continue
        body_code = code_of(lines[body])
        if body_code.startswith("{"):
            emit(index, line)
            for blank in range(index + 1, body):
                emit(blank, lines[blank])
            if body_code == "{":
                emit(body, lines[body])
                result.append(f"{indent}  {guard}")
            else:
                emit(body, lines[body].replace("{", "{ " + guard, 1))
            index = body + 1
            continue

        # Brace-less body: wrap it so the guard has a block to live in
        emit(index, f"{header} {{")
        result.append(f"{indent}  {guard}")
        pending_closes[_statement_end(lines, body)].append(indent)
        index += 1

    return result
