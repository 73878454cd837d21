"""
Call-site analysis for helper functions.

When a helper is called directly from the entry function with arguments
that only name values known at that point, the debug program replays the
entry function up to the call and reuses the literal arguments, so the
helper sees the same inputs it sees in the real program. Otherwise the
arguments are synthesized from parameter types.
"""

import re
from dataclasses import dataclass

from loguru import logger

from glsl_debug.engine.boundary import find_entry_function
from glsl_debug.engine.constants import (
    DEFINE_RE,
    FRAG_COORD,
    FUNCTION_DECL_RE,
    GLOBAL_DECLARATION_RE,
    GLSL_KEYWORDS,
    IDENTIFIER_RE,
    MAX_STATEMENT_LINES,
    OUTPUT_COLOR,
    SHADERTOY_UNIFORMS,
)
from glsl_debug.engine.defaults import (
    CallArguments,
    default_arguments,
    ensure_uv_setup,
)
from glsl_debug.engine.models import FunctionBoundary
from glsl_debug.engine.text_utils import (
    code_of,
    find_matching_paren,
    is_statement_complete,
    split_arguments,
    strip_comment,
)
from glsl_debug.engine.truncation import TruncationPlan, truncate_body
from glsl_debug.engine.type_table import build_type_table


_CALLED_NAME_RE = re.compile(r"(?<![\w.])([A-Za-z_]\w*)\s*\(")


@dataclass
class CallSite:
    """First call of a helper inside the entry function.

    Attributes:
        line: Line holding the helper's name
        statement_line: First line of the statement containing the call
        arguments: Argument expressions as written
        depth: Block depth of the call, 1 directly in the function body
    """

    line: int
    statement_line: int
    arguments: list[str]
    depth: int


def _call_pattern(name: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![\w.]){re.escape(name)}\s*\(")


def _statement_start(lines: list[str], line: int, floor: int) -> int:
    start = line
    while start - 1 > floor and not is_statement_complete(lines[start - 1]):
        start -= 1
    return start


def find_call_site(
    lines: list[str], entry: FunctionBoundary, name: str
) -> CallSite | None:
    """Find the first call of `name` in the entry function body.

    Args:
        lines: Source lines
        entry: Boundary of the entry function
        name: Helper function name

    Returns:
        The call site, or None when the entry function never calls it
    """
    if entry.body_line < 0:
        return None
    pattern = _call_pattern(name)
    depth = 0
    for index in range(entry.body_line, entry.end_line + 1):
        code = strip_comment(lines[index])
        offset = code.find("{") + 1 if index == entry.body_line else 0
        match = pattern.search(code, offset)
        if match is None:
            depth += code[offset:].count("{") - code[offset:].count("}")
            if index == entry.body_line:
                depth += 1
            continue

        before = code[offset : match.start()]
        call_depth = depth + before.count("{") - before.count("}")
        if index == entry.body_line:
            call_depth += 1

        tail = [code[match.end() - 1 :]]
        last = min(len(lines), index + MAX_STATEMENT_LINES)
        tail.extend(code_of(lines[k]) for k in range(index + 1, last))
        text = " ".join(tail)
        close = find_matching_paren(text, 0)
        if close < 0:
            return None
        return CallSite(
            line=index,
            statement_line=_statement_start(lines, index, entry.body_line),
            arguments=split_arguments(text[1:close]),
            depth=call_depth,
        )
    return None


def known_names(
    lines: list[str], entry: FunctionBoundary, before_line: int
) -> set[str]:
    """Identifiers that may be referenced at a line of the entry function."""
    names = set(SHADERTOY_UNIFORMS) | set(GLSL_KEYWORDS)
    names.update((FRAG_COORD, OUTPUT_COLOR))
    names.update(build_type_table(lines, before_line - 1, entry))

    depth = 0
    for index in range(0, entry.start_line):
        code = strip_comment(lines[index])
        if depth == 0:
            define = DEFINE_RE.match(code)
            declaration = GLOBAL_DECLARATION_RE.match(code)
            if define:
                names.add(define.group(1))
            elif declaration:
                names.add(declaration.group(1))
        depth = max(0, depth + code.count("{") - code.count("}"))
    return names


def _unknown_identifiers(arguments: list[str], names: set[str]) -> list[str]:
    return [
        match.group(1)
        for argument in arguments
        for match in IDENTIFIER_RE.finditer(argument)
        if match.group(1) not in names
    ]


def _is_reusable(
    lines: list[str],
    entry: FunctionBoundary,
    helper: FunctionBoundary,
    site: CallSite,
) -> bool:
    if site.depth != 1:
        logger.debug(f"Call of {helper.name} at line {site.line} is nested")
        return False
    if len(site.arguments) != len(helper.parameters):
        return False
    if [p.name for p in entry.parameters] != [OUTPUT_COLOR, FRAG_COORD]:
        return False
    unknown = _unknown_identifiers(
        site.arguments, known_names(lines, entry, site.statement_line)
    )
    if unknown:
        logger.debug(f"Call of {helper.name} uses unresolved names: {unknown}")
        return False
    return True


def _defined_functions(lines: list[str]) -> dict[str, int]:
    """Line of the first declaration of every user function."""
    functions: dict[str, int] = {}
    for index, line in enumerate(lines):
        match = FUNCTION_DECL_RE.match(strip_comment(line))
        if match:
            functions.setdefault(match.group(2), index)
    return functions


def _missing_functions(
    lines: list[str], helper: FunctionBoundary, texts: list[str]
) -> list[str]:
    """User functions called in `texts` that are not defined above the helper.

    Names that are not user functions are builtins or constructors and are
    always available.
    """
    functions = _defined_functions(lines)
    called = {
        match.group(1)
        for text in texts
        for match in _CALLED_NAME_RE.finditer(strip_comment(text))
    }
    return sorted(
        name
        for name in called
        if name in functions
        and name != helper.name
        and functions[name] >= helper.start_line
    )


def _replay(lines: list[str], entry: FunctionBoundary, site: CallSite) -> list[str]:
    plan = TruncationPlan(
        first_line=entry.body_line + 1, last_line=site.statement_line - 1
    )
    return truncate_body(lines, plan)


def resolve_call_arguments(
    lines: list[str],
    helper: FunctionBoundary,
    custom_parameters: dict[int, str] | None = None,
) -> CallArguments:
    """Arguments and setup lines for calling a helper from a fresh entry.

    Args:
        lines: Source lines
        helper: Boundary of the helper being debugged
        custom_parameters: Argument overrides keyed by signature position

    Returns:
        Arguments for the call and the statements that must precede it
    """
    custom = custom_parameters or {}
    entry = find_entry_function(lines)
    site = None
    if entry is not None and entry.name != helper.name:
        site = find_call_site(lines, entry, helper.name)

    setup: list[str] | None = None
    if site is not None and _is_reusable(lines, entry, helper, site):
        setup = _replay(lines, entry, site)
        missing = _missing_functions(lines, helper, setup + site.arguments)
        if missing:
            logger.debug(f"Call of {helper.name} needs later functions: {missing}")
            setup = None

    if setup is not None:
        logger.debug(f"Reusing call of {helper.name} at line {site.line}")
        args = list(site.arguments)
        for param in helper.parameters:
            if param.index in custom and not param.is_output:
                args[param.index] = custom[param.index]
        call = CallArguments(args=args, setup=setup)
    else:
        call = default_arguments(helper.parameters, custom)
    return ensure_uv_setup(call)
