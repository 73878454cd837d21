"""Per-editor debugging session state.

The engine itself is stateless. A DebugSession owns the overrides a user
builds up while stepping through one function, and drops them as soon as
the cursor moves into a different function, since loop and parameter
indices only mean something within the function they were recorded for.
"""

from dataclasses import dataclass, field

from loguru import logger

from glsl_debug.engine import (
    DebugFunctionContext,
    NormalizeMode,
    ShaderDebugError,
    apply_output_post_processing,
    extract_function_context,
    modify_shader_for_debugging,
)
from glsl_debug.engine.boundary import find_enclosing_function


@dataclass
class DebugSession:
    """Override maps and display flags for one editor session.

    Attributes:
        loop_max_iterations: Loop caps keyed by discovery index
        custom_parameters: Argument overrides keyed by signature position
        normalize_mode: Normalization of the shown value
        step_edge: Threshold of the shown value, None to skip
        inline_enabled: Show the value on the cursor line instead of the
            whole program
        last_function_name: Function the overrides belong to
    """

    loop_max_iterations: dict[int, int] = field(default_factory=dict)
    custom_parameters: dict[int, str] = field(default_factory=dict)
    normalize_mode: NormalizeMode = NormalizeMode.OFF
    step_edge: float | None = None
    inline_enabled: bool = True
    last_function_name: str | None = None

    def set_loop_cap(self, loop_index: int, max_iter: int | None) -> None:
        """Cap a loop, or remove its cap with None.

        Raises:
            ShaderDebugError: If the index or the cap is negative
        """
        if loop_index < 0:
            raise ShaderDebugError(f"Loop index must not be negative: {loop_index}")
        if max_iter is None:
            self.loop_max_iterations.pop(loop_index, None)
            return
        if max_iter < 0:
            raise ShaderDebugError(f"Loop cap must not be negative: {max_iter}")
        self.loop_max_iterations[loop_index] = max_iter

    def set_custom_parameter(self, index: int, value: str | None) -> None:
        """Override a helper argument, or restore its default with None."""
        if index < 0:
            raise ShaderDebugError(f"Parameter index must not be negative: {index}")
        if value is None or not value.strip():
            self.custom_parameters.pop(index, None)
            return
        self.custom_parameters[index] = value.strip()

    def set_normalize_mode(self, mode: NormalizeMode | str) -> None:
        self.normalize_mode = NormalizeMode.coerce(mode)

    def set_step_edge(self, step_edge: float | None) -> None:
        self.step_edge = step_edge

    def clear_overrides(self) -> None:
        self.loop_max_iterations.clear()
        self.custom_parameters.clear()

    def _track_function(self, name: str | None) -> None:
        """Drop the overrides when the cursor moved into another function."""
        if name == self.last_function_name:
            return
        if self.loop_max_iterations or self.custom_parameters:
            logger.debug(
                f"Function changed from {self.last_function_name} to {name}, "
                "clearing overrides"
            )
        self.clear_overrides()
        self.last_function_name = name

    def update_context(self, source: str, line: int) -> DebugFunctionContext | None:
        """Refresh the function context for a cursor position.

        Overrides recorded for another function are discarded before the
        context is built, so the returned loops and parameters only carry
        values that apply to this function.

        Args:
            source: Complete shader source
            line: 0-based cursor line

        Returns:
            The context, or None when no function encloses the line
        """
        context = extract_function_context(source, line)
        self._track_function(context.function_name if context is not None else None)
        if context is None:
            return None

        for loop in context.loops:
            loop.max_iter = self.loop_max_iterations.get(loop.loop_index)
        for param in context.parameters:
            if param.index in self.custom_parameters:
                param.custom_value = self.custom_parameters[param.index]
        return context

    def debug_source(self, source: str, line: int, line_text: str) -> str | None:
        """Debug program for a line using the session's overrides.

        Overrides recorded for another function are discarded first, the
        same way update_context does.
        """
        lines = source.split("\n")
        if 0 <= line < len(lines):
            self._track_function(find_enclosing_function(lines, line).name)
        return modify_shader_for_debugging(
            source,
            line,
            line_text,
            loop_max_iterations=self.loop_max_iterations,
            custom_parameters=self.custom_parameters,
            normalize_mode=self.normalize_mode,
            step_edge=self.step_edge,
        )

    def render_source(self, source: str, line: int, line_text: str) -> str | None:
        """Program to display for the current cursor position.

        With inline debugging on this is the debug program for the line (None
        when the line has nothing to show). Otherwise it is the whole program,
        post-processed when a normalization or threshold is active.
        """
        if self.inline_enabled:
            return self.debug_source(source, line, line_text)
        processed = apply_output_post_processing(
            source, self.normalize_mode, self.step_edge
        )
        return processed if processed is not None else source
