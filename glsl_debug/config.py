"""Runtime configuration for the command line tools.

Values come from `GLSL_DEBUG_*` environment variables and can be overridden
by command line options.
"""

import os
from dataclasses import dataclass

from glsl_debug.engine.errors import ShaderDebugError
from glsl_debug.engine.models import NormalizeMode

ENV_PREFIX = "GLSL_DEBUG_"

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class DebugConfig:
    """Settings shared by the CLI commands.

    Attributes:
        log_level: loguru level for the stderr sink
        width: Render width in pixels
        height: Render height in pixels
        time: iTime value for still renders
        normalize_mode: Default normalization of debugged values
        step_edge: Default threshold, None to skip
        loop_cap: Cap applied to every loop without an explicit cap
    """

    log_level: str = "WARNING"
    width: int = 800
    height: int = 450
    time: float = 0.0
    normalize_mode: NormalizeMode = NormalizeMode.OFF
    step_edge: float | None = None
    loop_cap: int | None = None

    def __post_init__(self) -> None:
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ShaderDebugError(f"Unknown log level: {self.log_level}")
        if self.width <= 0 or self.height <= 0:
            raise ShaderDebugError(
                f"Render size must be positive, got {self.width}x{self.height}"
            )
        self.normalize_mode = NormalizeMode.coerce(self.normalize_mode)
        if self.loop_cap is not None and self.loop_cap < 0:
            raise ShaderDebugError(f"Loop cap must not be negative: {self.loop_cap}")

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "DebugConfig":
        """Build a config from `GLSL_DEBUG_*` variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            The validated config

        Raises:
            ShaderDebugError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(f"{ENV_PREFIX}{name}")
            return value if value else None

        def convert(name: str, kind: type) -> object | None:
            value = get(name)
            if value is None:
                return None
            try:
                return kind(value)
            except ValueError as e:
                raise ShaderDebugError(
                    f"{ENV_PREFIX}{name} must be {kind.__name__}, got {value!r}"
                ) from e

        defaults = cls()
        width = convert("WIDTH", int)
        height = convert("HEIGHT", int)
        time = convert("TIME", float)
        return cls(
            log_level=get("LOG_LEVEL") or defaults.log_level,
            width=defaults.width if width is None else width,
            height=defaults.height if height is None else height,
            time=defaults.time if time is None else time,
            normalize_mode=NormalizeMode.coerce(get("NORMALIZE")),
            step_edge=convert("STEP", float),
            loop_cap=convert("LOOP_CAP", int),
        )
