"""
Constants and precompiled patterns shared by the debug engine stages.

Names of synthesized identifiers are part of the engine's contract with
downstream tooling and must not change.
"""

import re

from glsl_debug.engine.glsl_types import RETURN_TYPE_NAMES, VALUE_TYPES

# Entry point of a Shadertoy image shader
ENTRY_FUNCTION = "mainImage"
ENTRY_SIGNATURE = "void mainImage(out vec4 fragColor, in vec2 fragCoord) {"
OUTPUT_COLOR = "fragColor"
FRAG_COORD = "fragCoord"

# Synthesized identifiers
LOOP_COUNTER_PREFIX = "_dbgIter"
RETURN_BINDING = "_dbgReturn"
SHADOW_BINDING = "_dbgShadow"
OUT_ARGUMENT_PREFIX = "_dbgOut"
RESULT_BINDING = "result"
FALLBACK_RESULT_BINDING = "_dbgResult"

# Screen-coordinate setup shared by default vec2 arguments
UV_NAME = "uv"
UV_SETUP = "  vec2 uv = fragCoord / iResolution.xy;"
CENTERED_UV = "((fragCoord * 2.0 - iResolution.xy) / iResolution.y)"

# Built-in inputs every Shadertoy program may reference
SHADERTOY_UNIFORMS: frozenset[str] = frozenset(
    {
        "iResolution",
        "iTime",
        "iTimeDelta",
        "iFrameRate",
        "iFrame",
        "iMouse",
        "iDate",
        "iSampleRate",
        "iChannelTime",
        "iChannelResolution",
        "iChannel0",
        "iChannel1",
        "iChannel2",
        "iChannel3",
    }
)

# Maximum number of source lines a single statement is assumed to span
MAX_STATEMENT_LINES = 10

_VALUE_TYPE_ALT = "|".join(t.value for t in VALUE_TYPES)
_RETURN_TYPE_ALT = "|".join(RETURN_TYPE_NAMES)
_PRECISION = r"(?:(?:highp|mediump|lowp)\s+)?"

# `vec3 name(` at the start of a line; group 1 is the return type, 2 the name
FUNCTION_DECL_RE = re.compile(
    rf"^\s*{_PRECISION}({_RETURN_TYPE_ALT})\s+([A-Za-z_]\w*)\s*\("
)

# `vec3 name =` or `vec3 name;` anywhere in a line
DECLARATION_RE = re.compile(
    rf"(?<![\w.])({_VALUE_TYPE_ALT})\s+([A-Za-z_]\w*)\s*(?:=(?!=)|;)"
)

# `vec3 name =` only, used by the target detector
INITIALIZED_DECLARATION_RE = re.compile(
    rf"(?<![\w.])({_VALUE_TYPE_ALT})\s+([A-Za-z_]\w*)\s*=(?!=)"
)

# A single parameter inside a signature
PARAMETER_RE = re.compile(
    r"^(?:const\s+)?(?:(in|out|inout)\s+)?(?:(?:highp|mediump|lowp)\s+)?"
    r"([A-Za-z_]\w*)\s+([A-Za-z_]\w*)"
)

RETURN_RE = re.compile(r"^\s*return\b\s*(.+?)\s*;", re.DOTALL)
RETURN_ANYWHERE_RE = re.compile(r"\breturn\b[^;]*;")
COMPOUND_ASSIGN_RE = re.compile(r"(?<![\w.])([A-Za-z_]\w*)\s*[*+\-/]=")
PLAIN_ASSIGN_RE = re.compile(r"^\s*([A-Za-z_]\w*)\s*=(?!=)")
MEMBER_ASSIGN_RE = re.compile(
    r"(?<![\w.])([A-Za-z_]\w*)(?:\.[xyzwrgbastpq]+|\[[^\]]+\])+\s*[*+\-/]?=(?!=)"
)

FOR_RE = re.compile(r"^\s*for\s*\(")
CONTROL_FLOW_RE = re.compile(r"^\s*(?:\}\s*)?(?:if|else|while|do|switch|for)\b")
EARLY_EXIT_RE = re.compile(r"^\s*(?:return|discard|break|continue)\b")
IDENTIFIER_RE = re.compile(r"(?<![\w.])([A-Za-z_]\w*)\b(?!\s*\()")
DEFINE_RE = re.compile(r"^\s*#\s*define\s+([A-Za-z_]\w*)")
GLOBAL_DECLARATION_RE = re.compile(
    r"^\s*(?:(?:const|uniform)\s+)?(?:(?:highp|mediump|lowp)\s+)?"
    r"[A-Za-z_]\w*\s+([A-Za-z_]\w*)\s*(?:=|;|\[)"
)

GLSL_KEYWORDS: frozenset[str] = frozenset({"true", "false"})
