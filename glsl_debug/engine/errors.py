"""
Exceptions raised by the shader debug engine.

The engine reports "nothing to visualize on this line" by returning None.
Exceptions are reserved for caller mistakes and for rendering failures.
"""


class ShaderDebugError(Exception):
    """Base exception for invalid use of the debug engine.

    Examples:
        >>> raise ShaderDebugError("Unknown normalize mode: loud")
        ShaderDebugError: Unknown normalize mode: loud
    """

    def __init__(self, message: str, line: int | None = None):
        """Initialize the exception with a message and optional source line.

        Args:
            message: The error message
            line: Optional 0-based shader line the error refers to
        """
        self.message = message
        self.line = line
        location_info = f" at line {line + 1}" if line is not None else ""
        super().__init__(f"{message}{location_info}")


class RenderError(ShaderDebugError):
    """Raised when an OpenGL context or framebuffer cannot be created."""


class ShaderCompileError(ShaderDebugError):
    """Raised when the GPU driver rejects a generated program."""
