"""Shared shader sources for the engine tests.

Sources are built from line lists so tests can refer to 0-based lines.
"""

import pytest

CIRCLE_SHADER = [
    "float sdCircle(vec2 p, float r) {",  # 0
    "  return length(p) - r;",  # 1
    "}",  # 2
    "",  # 3
    "void mainImage(out vec4 fragColor, in vec2 fragCoord) {",  # 4
    "  vec2 uv = fragCoord / iResolution.xy;",  # 5
    "  float d = sdCircle(uv, 0.5);",  # 6
    "  if (d < 0.0) {",  # 7
    "    d = -d;",  # 8
    "  } else {",  # 9
    "    d = d * 2.0;",  # 10
    "  }",  # 11
    "  vec3 col = vec3(d);",  # 12
    "  fragColor = vec4(col, 1.0);",  # 13
    "}",  # 14
]

LOOP_SHADER = [
    "vec2 dTree(vec2 p) {",  # 0
    "  vec2 res = vec2(1e10, 0.0);",  # 1
    "  for (int i = 0; i < 4; i++) {",  # 2
    "    res.x = min(res.x, length(p) - float(i));",  # 3
    "    if (res.x < 0.0) return res;",  # 4
    "  }",  # 5
    "  return res;",  # 6
    "}",  # 7
    "",  # 8
    "void mainImage(out vec4 fragColor, in vec2 fragCoord) {",  # 9
    "  vec2 uv = fragCoord / iResolution.xy;",  # 10
    "  float t = 0.0;",  # 11
    "  for (int i = 0; i < 100; i++) {",  # 12
    "    float x = float(i) * 0.01;",  # 13
    "    t += x;",  # 14
    "  }",  # 15
    "  vec3 color = vec3(t);",  # 16
    "  fragColor = vec4(color, 1.0);",  # 17
    "}",  # 18
]

HELPERS_SHADER = [
    "#define PI 3.14159",  # 0
    "const float SCALE = 2.0;",  # 1
    "",  # 2
    "float sphere(vec3 p, float r) {",  # 3
    "  return length(p) - r;",  # 4
    "}",  # 5
    "",  # 6
    "vec2 sdCutHollowSphere(vec3 p, float r, float h, float t) {",  # 7
    "  float w = sqrt(r * r - h * h);",  # 8
    "  vec2 q = vec2(length(p.xz), p.y);",  # 9
    "  return vec2(w, q.y);",  # 10
    "}",  # 11
    "",  # 12
    "float scene(vec3 p, float jt) {",  # 13
    "  float s = sphere(p, jt);",  # 14
    "  vec2 c = sdCutHollowSphere(p, 0.5, jt, 0.1);",  # 15
    "  return min(s, c.x);",  # 16
    "}",  # 17
    "",  # 18
    "void setup() {",  # 19
    "  float unused = 1.0;",  # 20
    "}",  # 21
    "",  # 22
    "void mainImage(out vec4 fragColor, in vec2 fragCoord) {",  # 23
    "  vec2 uv = fragCoord / iResolution.xy;",  # 24
    "  float d = scene(vec3(uv, 0.0), SCALE * PI);",  # 25
    "  fragColor = vec4(vec3(d), 1.0);",  # 26
    "}",  # 27
]


@pytest.fixture
def circle_lines() -> list[str]:
    return list(CIRCLE_SHADER)


@pytest.fixture
def circle_source() -> str:
    return "\n".join(CIRCLE_SHADER)


@pytest.fixture
def loop_lines() -> list[str]:
    return list(LOOP_SHADER)


@pytest.fixture
def loop_source() -> str:
    return "\n".join(LOOP_SHADER)


@pytest.fixture
def helpers_lines() -> list[str]:
    return list(HELPERS_SHADER)


@pytest.fixture
def helpers_source() -> str:
    return "\n".join(HELPERS_SHADER)
