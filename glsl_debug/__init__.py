from glsl_debug.engine import (
    DebugFunctionContext,
    NormalizeMode,
    ShaderDebugError,
    apply_output_post_processing,
    extract_function_context,
    modify_shader_for_debugging,
)
from glsl_debug.session import DebugSession

__version__ = "0.1.0"


__all__ = [
    "DebugFunctionContext",
    "DebugSession",
    "NormalizeMode",
    "ShaderDebugError",
    "apply_output_post_processing",
    "extract_function_context",
    "modify_shader_for_debugging",
]
