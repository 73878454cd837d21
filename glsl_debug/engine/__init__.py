"""Shader debug transformation engine."""

from glsl_debug.engine.context import extract_function_context
from glsl_debug.engine.debugger import modify_shader_for_debugging
from glsl_debug.engine.errors import (
    RenderError,
    ShaderCompileError,
    ShaderDebugError,
)
from glsl_debug.engine.glsl_types import GlslType
from glsl_debug.engine.models import (
    DebugFunctionContext,
    DebugLoopInfo,
    DebugParameterInfo,
    NormalizeMode,
    ParameterMode,
)
from glsl_debug.engine.post_processing import apply_output_post_processing

__all__ = [
    "DebugFunctionContext",
    "DebugLoopInfo",
    "DebugParameterInfo",
    "GlslType",
    "NormalizeMode",
    "ParameterMode",
    "RenderError",
    "ShaderCompileError",
    "ShaderDebugError",
    "apply_output_post_processing",
    "extract_function_context",
    "modify_shader_for_debugging",
]
