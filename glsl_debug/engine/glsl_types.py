"""GLSL value types understood by the debug engine.

Only the fixed set of scalar, vector, matrix and sampler types is modeled.
User-defined structs and arrays are not.
"""

from enum import Enum


class GlslType(Enum):
    """Closed set of GLSL types the engine can infer and visualize."""

    FLOAT = "float"
    INT = "int"
    BOOL = "bool"
    VEC2 = "vec2"
    VEC3 = "vec3"
    VEC4 = "vec4"
    MAT2 = "mat2"
    MAT3 = "mat3"
    MAT4 = "mat4"
    SAMPLER2D = "sampler2D"

    @classmethod
    def parse(cls, name: str | None) -> "GlslType | None":
        """Look up a type by its GLSL spelling.

        Args:
            name: Type name as written in source, e.g. "vec3"

        Returns:
            Matching GlslType or None for unknown names (structs, void, ...)
        """
        if name is None:
            return None
        try:
            return cls(name.strip())
        except ValueError:
            return None

    @property
    def component_count(self) -> int:
        """Number of scalar components (matrices count columns * rows)."""
        return _COMPONENT_COUNTS[self]

    @property
    def is_matrix(self) -> bool:
        return self in (GlslType.MAT2, GlslType.MAT3, GlslType.MAT4)

    @property
    def is_opaque(self) -> bool:
        return self is GlslType.SAMPLER2D

    def __str__(self) -> str:
        return self.value


_COMPONENT_COUNTS: dict[GlslType, int] = {
    GlslType.FLOAT: 1,
    GlslType.INT: 1,
    GlslType.BOOL: 1,
    GlslType.VEC2: 2,
    GlslType.VEC3: 3,
    GlslType.VEC4: 4,
    GlslType.MAT2: 4,
    GlslType.MAT3: 9,
    GlslType.MAT4: 16,
    GlslType.SAMPLER2D: 0,
}

# Types that may appear in a variable declaration the engine tracks
VALUE_TYPES: tuple[GlslType, ...] = tuple(t for t in GlslType if not t.is_opaque)

# Declared return types a function signature may carry
RETURN_TYPE_NAMES: tuple[str, ...] = ("void",) + tuple(t.value for t in VALUE_TYPES)
