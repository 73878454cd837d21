"""
Function body truncation.

Rewrites a slice of a function body so it can run straight through to a
debug statement:

- `if`/`else`/`while`/`do` headers are removed together with the braces
  they open, leaving their statements in sequence;
- `for` loops are kept verbatim (they are capped separately);
- early exits (`return`, `discard`, `break`, `continue`) outside kept loops
  are dropped, and inside kept loops `return` becomes `break;` or, in the
  loop holding the debug statement of a helper, a return of the shadow
  binding.

The output keeps every brace it opens matched except the function's own
and those of blocks still open at the cut, which the caller closes.
"""

import re
from dataclasses import dataclass

from glsl_debug.engine.constants import (
    EARLY_EXIT_RE,
    FOR_RE,
    RETURN_ANYWHERE_RE,
    RETURN_BINDING,
    SHADOW_BINDING,
)
from glsl_debug.engine.loops import loop_end
from glsl_debug.engine.models import DebugLoopInfo, DebugTarget, TargetKind
from glsl_debug.engine.text_utils import (
    code_of,
    find_block_end,
    find_matching_paren,
    indent_of,
    strip_comment,
)

_HEADER_RE = re.compile(r"^(if|while|else|do)\b")
_SWITCH_RE = re.compile(r"^\s*switch\s*\(")
_RETURN_WORD_RE = re.compile(r"\breturn\b\s*")


@dataclass
class TruncationPlan:
    """What to keep and how to rewrite a function body.

    Attributes:
        first_line: First body line to rewrite
        last_line: Last body line to rewrite, inclusive
        target: Debug target whose statement is emitted as is
        shadow_loop: Outermost loop holding the debug statement
        in_helper: Whether the body belongs to a helper function
    """

    first_line: int
    last_line: int
    target: DebugTarget | None = None
    shadow_loop: DebugLoopInfo | None = None
    in_helper: bool = False


class BodyRewriter:
    """Line-by-line rewriter implementing a TruncationPlan."""

    def __init__(self, lines: list[str], plan: TruncationPlan):
        self.lines = lines
        self.plan = plan
        self.output: list[str] = []
        self._blocks: list[bool] = []  # True when the block's braces are emitted
        self._pending_header = False
        self._condition_depth = 0
        self._skip_statement = False

    def rewrite(self) -> list[str]:
        index = self.plan.first_line
        last = min(self.plan.last_line, len(self.lines) - 1)
        while index <= last:
            line = self.lines[index]
            code = code_of(line)

            if self._condition_depth > 0:
                self._continue_condition(line, code)
                index += 1
                continue

            if self._skip_statement:
                self._skip_statement = not code.endswith(";")
                index += 1
                continue

            if self._is_debug_line(index):
                self._pending_header = False
                self._emit_debug_line(index)
                index += 1
                continue

            if FOR_RE.match(code) or _SWITCH_RE.match(code):
                index = self._keep_region(index, last) + 1
                self._pending_header = False
                continue

            self._consume(indent_of(line), code, line)
            index += 1
        return self.output

    def _is_debug_line(self, index: int) -> bool:
        target = self.plan.target
        return target is not None and target.start_line <= index <= target.end_line

    def _debug_text(self, index: int) -> str:
        line = self.lines[index]
        target = self.plan.target
        if target is not None and target.kind is TargetKind.RETURN:
            binding = f"{target.type} {RETURN_BINDING} = "
            line = _RETURN_WORD_RE.sub(binding, line, count=1)
        return line

    def _emit_debug_line(self, index: int) -> None:
        self.output.append(self._debug_text(index))

    def _keep_region(self, index: int, last: int) -> int:
        """Emit a loop or switch verbatim apart from its exits; return its end."""
        code = strip_comment(self.lines[index])
        if FOR_RE.match(code):
            end = loop_end(self.lines, index)
        else:
            end = find_block_end(self.lines, index)
        end = min(end if end >= 0 else last, last)

        shadow_loop = self.plan.shadow_loop
        is_containing = shadow_loop is not None and shadow_loop.line_number == index
        if is_containing:
            target = self.plan.target
            indent = indent_of(self.lines[index])
            self.output.append(f"{indent}{target.type} {SHADOW_BINDING};")

        for current in range(index, end + 1):
            if self._is_debug_line(current):
                self._emit_debug_line(current)
                if current == self.plan.target.end_line and shadow_loop is not None:
                    indent = indent_of(self.lines[self.plan.target.start_line])
                    name = self.plan.target.name
                    self.output.append(f"{indent}{SHADOW_BINDING} = {name};")
                continue
            self.output.append(self._loop_exit(self.lines[current], is_containing))
        return end

    def _loop_exit(self, line: str, is_containing: bool) -> str:
        code = strip_comment(line)
        if not RETURN_ANYWHERE_RE.search(code):
            return line
        if is_containing and self.plan.in_helper:
            replacement = f"return {SHADOW_BINDING};"
        else:
            replacement = "break;"
        return RETURN_ANYWHERE_RE.sub(replacement, code).rstrip()

    def _continue_condition(self, line: str, code: str) -> None:
        for position, char in enumerate(code):
            if char == "(":
                self._condition_depth += 1
            elif char == ")":
                self._condition_depth -= 1
                if self._condition_depth == 0:
                    self._consume(indent_of(line), code[position + 1 :].strip(), line)
                    return

    def _consume(self, indent: str, code: str, line: str) -> None:
        original = code_of(line)
        while code:
            if code.startswith("}"):
                emitted = self._blocks.pop() if self._blocks else True
                if emitted:
                    self.output.append(f"{indent}}}")
                code = code[1:].strip()
                continue

            if code.startswith("{"):
                if self._pending_header:
                    self._blocks.append(False)
                    self._pending_header = False
                else:
                    self._blocks.append(True)
                    self.output.append(f"{indent}{{")
                code = code[1:].strip()
                continue

            header = _HEADER_RE.match(code)
            if header:
                self._pending_header = True
                keyword = header.group(1)
                if keyword in ("if", "while"):
                    open_index = code.find("(")
                    if open_index < 0:
                        return
                    close = find_matching_paren(code, open_index)
                    if close < 0:
                        self._condition_depth = (
                            code[open_index:].count("(") - code[open_index:].count(")")
                        )
                        return
                    code = code[close + 1 :].strip()
                else:
                    code = code[len(keyword) :].strip()
                if code == ";":
                    # Tail of `do { ... } while (c);`
                    self._pending_header = False
                    return
                continue

            self._pending_header = False
            if EARLY_EXIT_RE.match(code):
                self._skip_statement = not code.endswith(";")
                return
            if code == original:
                self.output.append(line)
            else:
                self.output.append(f"{indent}{code}")
            return


def truncate_body(lines: list[str], plan: TruncationPlan) -> list[str]:
    """Rewrite the body slice described by `plan`."""
    return BodyRewriter(lines, plan).rewrite()
