"""
Default value synthesis for helper-function parameters.

Every parameter type maps to an expression that compiles inside a freshly
synthesized entry function. vec2 parameters default to the normalized
screen coordinate, everything else to a neutral constant.
"""

import re
from dataclasses import dataclass, field

from glsl_debug.engine.constants import (
    CENTERED_UV,
    IDENTIFIER_RE,
    OUT_ARGUMENT_PREFIX,
    UV_NAME,
    UV_SETUP,
)
from glsl_debug.engine.glsl_types import GlslType
from glsl_debug.engine.models import (
    DebugParameterInfo,
    FunctionParameter,
    ParameterMode,
)

DEFAULT_ARGUMENTS: dict[GlslType, str] = {
    GlslType.VEC2: UV_NAME,
    GlslType.VEC3: "vec3(0.5)",
    GlslType.VEC4: "vec4(0.5)",
    GlslType.FLOAT: "0.5",
    GlslType.INT: "1",
    GlslType.BOOL: "true",
    GlslType.MAT2: "mat2(1.0)",
    GlslType.MAT3: "mat3(1.0)",
    GlslType.MAT4: "mat4(1.0)",
    GlslType.SAMPLER2D: "iChannel0",
}

FALLBACK_ARGUMENT = "0.0"

_UV_DECLARATION_RE = re.compile(r"\bvec2\s+uv\b")

UV_VALUES: dict[GlslType, str] = {
    GlslType.VEC2: "uv",
    GlslType.FLOAT: "uv.x",
    GlslType.VEC3: "vec3(uv, 0.0)",
    GlslType.VEC4: "vec4(uv, 0.0, 1.0)",
    GlslType.INT: "int(uv.x * 10.0)",
    GlslType.BOOL: "uv.x > 0.5",
    GlslType.MAT2: "mat2(uv.x)",
    GlslType.MAT3: "mat3(uv.x)",
    GlslType.MAT4: "mat4(uv.x)",
}

CENTERED_UV_VALUES: dict[GlslType, str] = {
    GlslType.VEC2: CENTERED_UV,
    GlslType.FLOAT: f"{CENTERED_UV}.x",
    GlslType.VEC3: f"vec3({CENTERED_UV}, 0.0)",
    GlslType.VEC4: f"vec4({CENTERED_UV}, 0.0, 1.0)",
    GlslType.INT: f"int({CENTERED_UV}.x * 10.0)",
    GlslType.BOOL: "fragCoord.x > iResolution.x * 0.5",
    GlslType.MAT2: f"mat2({CENTERED_UV}.x)",
    GlslType.MAT3: f"mat3({CENTERED_UV}.x)",
    GlslType.MAT4: f"mat4({CENTERED_UV}.x)",
}


def default_argument(glsl_type: GlslType | None) -> str:
    """Literal passed for a parameter the caller did not override."""
    if glsl_type is None:
        return FALLBACK_ARGUMENT
    return DEFAULT_ARGUMENTS[glsl_type]


def default_custom_value(glsl_type: GlslType | None) -> str:
    """Initial value shown for a parameter in custom mode."""
    if glsl_type is GlslType.VEC2:
        return "vec2(0.5)"
    return default_argument(glsl_type)


def parameter_info(param: FunctionParameter) -> DebugParameterInfo:
    """Describe a parameter for the debugging control panel."""
    glsl_type = param.glsl_type
    custom = default_custom_value(glsl_type)
    is_vec2 = glsl_type is GlslType.VEC2
    return DebugParameterInfo(
        name=param.name,
        type=param.type_name,
        uv_value=UV_VALUES.get(glsl_type, "") if glsl_type else "",
        centered_uv_value=CENTERED_UV_VALUES.get(glsl_type, "") if glsl_type else "",
        default_custom_value=custom,
        mode=ParameterMode.UV if is_vec2 else ParameterMode.CUSTOM,
        custom_value=custom,
        index=param.index,
    )


@dataclass
class CallArguments:
    """Argument list and the setup statements it relies on."""

    args: list[str] = field(default_factory=list)
    setup: list[str] = field(default_factory=list)


def default_arguments(
    parameters: list[FunctionParameter],
    custom_parameters: dict[int, str] | None = None,
) -> CallArguments:
    """Synthesize a full argument list for a helper function.

    `out` parameters get a local variable to write into; `inout` parameters
    get one initialized with the default (or overridden) value.

    Args:
        parameters: Parsed signature parameters
        custom_parameters: Caller overrides keyed by signature position

    Returns:
        Arguments and their setup lines
    """
    custom = custom_parameters or {}
    call = CallArguments()
    for param in parameters:
        value = custom.get(param.index, default_argument(param.glsl_type))
        if param.qualifier == "out":
            name = f"{OUT_ARGUMENT_PREFIX}{param.index}"
            call.setup.append(f"  {param.type_name} {name};")
            call.args.append(name)
        elif param.qualifier == "inout":
            name = f"{OUT_ARGUMENT_PREFIX}{param.index}"
            call.setup.append(f"  {param.type_name} {name} = {value};")
            call.args.append(name)
        else:
            call.args.append(value)
    return call


def ensure_uv_setup(call: CallArguments) -> CallArguments:
    """Insert the uv setup line once when an argument references `uv`."""

    def mentions_uv(text: str) -> bool:
        return any(m.group(1) == UV_NAME for m in IDENTIFIER_RE.finditer(text))

    declares_uv = any(_UV_DECLARATION_RE.search(line) for line in call.setup)
    if declares_uv or not any(mentions_uv(arg) for arg in call.args + call.setup):
        return call
    return CallArguments(args=call.args, setup=[UV_SETUP, *call.setup])
