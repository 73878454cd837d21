"""
Data models shared by the debug engine stages.

This module contains the dataclass definitions that describe a resolved
function boundary, a detected debug target, loop and parameter metadata,
and the function context handed to editing UIs.
"""

from dataclasses import dataclass, field
from enum import Enum, auto

from glsl_debug.engine.errors import ShaderDebugError
from glsl_debug.engine.glsl_types import GlslType


class NormalizeMode(Enum):
    """How signed values are remapped before display."""

    OFF = "off"
    SOFT = "soft"
    ABS = "abs"

    @classmethod
    def coerce(cls, value: "NormalizeMode | str | None") -> "NormalizeMode":
        """Accept either an enum member or its string spelling.

        Raises:
            ShaderDebugError: If the string is not a known mode
        """
        if value is None:
            return cls.OFF
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            raise ShaderDebugError(f"Unknown normalize mode: {value}") from e


class ParameterMode(Enum):
    """Where a helper-function argument comes from in the debug program."""

    UV = "uv"
    CENTERED_UV = "centered-uv"
    CUSTOM = "custom"


class TargetKind(Enum):
    """Statement shape a debug target was detected in."""

    RETURN = auto()
    DECLARATION = auto()
    ASSIGNMENT = auto()
    MEMBER_ASSIGNMENT = auto()
    FUNCTION_RESULT = auto()


class GenerationPath(Enum):
    """The four mutually exclusive ways a debug program is assembled."""

    ENTRY_TRUNCATION = auto()
    HELPER_TARGET = auto()
    HELPER_FULL_FUNCTION = auto()
    ONE_LINER = auto()


@dataclass
class FunctionParameter:
    """Parameter of a function signature.

    Attributes:
        name: Parameter name
        type_name: Type as written in source
        qualifier: "in", "out", "inout" or None
        index: Position in the full signature
    """

    name: str
    type_name: str
    qualifier: str | None
    index: int

    @property
    def glsl_type(self) -> GlslType | None:
        return GlslType.parse(self.type_name)

    @property
    def is_output(self) -> bool:
        return self.qualifier in ("out", "inout")


@dataclass
class FunctionBoundary:
    """Function enclosing a source line.

    Attributes:
        name: Function name, None when the line is at top level
        start_line: Line of the declaration (-1 at top level)
        end_line: Line of the closing brace (-1 when unknown)
        return_type: Declared return type as written, "void" included
        parameters: Parsed signature parameters
        body_line: Line holding the opening brace of the body
    """

    name: str | None
    start_line: int = -1
    end_line: int = -1
    return_type: str | None = None
    parameters: list[FunctionParameter] = field(default_factory=list)
    body_line: int = -1

    @property
    def is_top_level(self) -> bool:
        return self.name is None


@dataclass
class SourceStatement:
    """A statement as seen by the detector, possibly joined from several lines."""

    text: str
    start_line: int
    end_line: int


@dataclass
class DebugTarget:
    """The value a query line resolves to.

    Attributes:
        name: Variable name or a synthetic binding such as _dbgReturn
        type: Type used for visualization
        kind: Statement shape the target came from
        expression: Returned expression for RETURN targets
        start_line: First line of the statement
        end_line: Last line of the statement
    """

    name: str
    type: GlslType
    kind: TargetKind
    expression: str | None = None
    start_line: int = -1
    end_line: int = -1


@dataclass
class DebugParameterInfo:
    """Per-parameter metadata for the debugging control panel."""

    name: str
    type: str
    uv_value: str
    centered_uv_value: str
    default_custom_value: str
    mode: ParameterMode
    custom_value: str
    index: int


@dataclass
class DebugLoopInfo:
    """A `for` loop found while scanning a function.

    Attributes:
        loop_index: 0-based discovery index within the function
        line_number: Line of the loop header
        end_line: Line of the loop's closing brace or single body statement
        loop_header: Header text, e.g. "for (int i = 0; i < 10; i++)"
        max_iter: Iteration cap, None when uncapped
    """

    loop_index: int
    line_number: int
    end_line: int
    loop_header: str
    max_iter: int | None = None

    def contains(self, line: int) -> bool:
        """Whether a line lies inside the loop body."""
        return self.line_number < line <= self.end_line


@dataclass
class DebugFunctionContext:
    """Read-only description of the function around a query line."""

    function_name: str
    return_type: str
    parameters: list[DebugParameterInfo] = field(default_factory=list)
    is_function: bool = True
    loops: list[DebugLoopInfo] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        """Plain JSON-ready representation."""
        return {
            "functionName": self.function_name,
            "returnType": self.return_type,
            "isFunction": self.is_function,
            "parameters": [
                {
                    "name": p.name,
                    "type": p.type,
                    "index": p.index,
                    "uvValue": p.uv_value,
                    "centeredUvValue": p.centered_uv_value,
                    "defaultCustomValue": p.default_custom_value,
                    "mode": p.mode.value,
                    "customValue": p.custom_value,
                }
                for p in self.parameters
            ],
            "loops": [
                {
                    "loopIndex": loop.loop_index,
                    "lineNumber": loop.line_number,
                    "endLine": loop.end_line,
                    "loopHeader": loop.loop_header,
                    "maxIter": loop.max_iter,
                }
                for loop in self.loops
            ],
        }
