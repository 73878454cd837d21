"""Line-level helpers for the lightweight GLSL scanners."""

import re

_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/")


def strip_comment(line: str) -> str:
    """Drop inline block comments and a trailing `//` comment."""
    line = _BLOCK_COMMENT_RE.sub("", line)
    index = line.find("//")
    return line[:index] if index >= 0 else line


def code_of(line: str) -> str:
    """Comment-free, whitespace-trimmed text of a line."""
    return strip_comment(line).strip()


def brace_delta(line: str) -> int:
    """Opened minus closed braces on a line, comments ignored."""
    code = strip_comment(line)
    return code.count("{") - code.count("}")


def indent_of(line: str, default: str = "") -> str:
    match = re.match(r"^(\s*)", line)
    indent = match.group(1) if match else ""
    return indent or default


def is_statement_complete(line: str) -> bool:
    """Whether a line ends a statement or block, or is empty."""
    code = code_of(line)
    return not code or code.endswith((";", "{", "}")) or code.startswith("#")


def find_matching_paren(text: str, open_index: int) -> int:
    """Index of the `)` matching the `(` at open_index, or -1."""
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return -1


def find_block_end(lines: list[str], line: int, column: int = 0) -> int:
    """Line of the brace closing the first `{` at or after (line, column).

    Returns:
        Line index of the closing brace, or -1 if the block never closes
    """
    depth = 0
    opened = False
    for index in range(line, len(lines)):
        code = strip_comment(lines[index])
        if index == line:
            code = code[column:]
        for char in code:
            if char == "{":
                depth += 1
                opened = True
            elif char == "}":
                depth -= 1
                if opened and depth == 0:
                    return index
    return -1


def split_arguments(text: str) -> list[str]:
    """Split an argument list on top-level commas."""
    args: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in "([":
            depth += 1
        elif char in ")]":
            depth -= 1
        if char == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    tail = "".join(current).strip()
    if tail or args:
        args.append(tail)
    return args
