"""Command line interface for glsl-debug.

This module provides commands to generate debug programs for a line of a
Shadertoy shader, inspect the function around a line, post-process whole
programs and preview the result offscreen.
"""

import json
import os
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import arrow
import typer
import watchdog.events
import watchdog.observers
from loguru import logger
from watchdog.events import FileSystemEventHandler

from glsl_debug.config import DebugConfig
from glsl_debug.engine import (
    ShaderDebugError,
    apply_output_post_processing,
    extract_function_context,
    modify_shader_for_debugging,
)
from glsl_debug.render import render_image

# Define type variables for TypedCallable
F = TypeVar("F", bound=Callable[..., Any])


# TypedCommand decorator helper
def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="glsl-debug",
    help=(
        "Visualize the value computed on any line of a Shadertoy shader. "
        "Commands: debug, context, postprocess, render-image, watch."
    ),
    add_completion=False,
)


def _configure(log_level: str | None = None) -> DebugConfig:
    """Load the config from the environment and set up the log sink."""
    try:
        config = DebugConfig.from_env()
        if log_level:
            config = DebugConfig(**{**config.__dict__, "log_level": log_level})
    except ShaderDebugError as e:
        logger.error(f"Invalid configuration: {e}")
        raise typer.Exit(1) from e
    logger.remove()
    logger.add(sys.stderr, level=config.log_level)
    return config


def _read_source(shader_file: Path) -> str:
    try:
        return shader_file.read_text()
    except OSError as e:
        logger.error(f"Failed to read shader file: {e}")
        raise typer.Exit(1) from e


def _parse_pairs(values: list[str], option: str) -> dict[int, str]:
    """Parse repeated `INDEX=VALUE` options."""
    pairs: dict[int, str] = {}
    for value in values:
        index, separator, rest = value.partition("=")
        if not separator or not index.strip().isdigit() or not rest.strip():
            logger.error(f"{option} expects INDEX=VALUE, got {value!r}")
            raise typer.Exit(1)
        pairs[int(index)] = rest.strip()
    return pairs


def _parse_loop_caps(values: list[str]) -> dict[int, int]:
    caps: dict[int, int] = {}
    for index, cap in _parse_pairs(values, "--loop-cap").items():
        if not cap.isdigit():
            logger.error(f"--loop-cap expects a non-negative integer, got {cap!r}")
            raise typer.Exit(1)
        caps[index] = int(cap)
    return caps


def _source_line(source: str, line: int) -> tuple[int, str]:
    """Convert a 1-based line number to an index and its text."""
    lines = source.split("\n")
    if not 1 <= line <= len(lines):
        logger.error(f"Line {line} is outside the file (1-{len(lines)})")
        raise typer.Exit(1)
    return line - 1, lines[line - 1]


def _default_caps(
    source: str, line: int, caps: dict[int, int], config: DebugConfig
) -> dict[int, int]:
    """Apply the configured cap to every loop without an explicit one."""
    if config.loop_cap is None:
        return caps
    context = extract_function_context(source, line)
    if context is None:
        return caps
    merged = {loop.loop_index: config.loop_cap for loop in context.loops}
    merged.update(caps)
    return merged


def _generate(
    source: str,
    line: int,
    config: DebugConfig,
    loop_caps: dict[int, int] | None = None,
    params: dict[int, str] | None = None,
) -> str | None:
    index, line_text = _source_line(source, line)
    caps = _default_caps(source, index, loop_caps or {}, config)
    try:
        return modify_shader_for_debugging(
            source,
            index,
            line_text,
            loop_max_iterations=caps,
            custom_parameters=params,
            normalize_mode=config.normalize_mode,
            step_edge=config.step_edge,
        )
    except ShaderDebugError as e:
        logger.error(f"Invalid debug request: {e}")
        raise typer.Exit(1) from e


def _header(shader_file: Path, line: int) -> str:
    timestamp = arrow.utcnow().format("YYYY-MM-DD HH:mm:ss UTC")
    return (
        f"// Debug program for {shader_file.name}:{line}\n"
        f"// Generated: {timestamp}\n"
    )


def _emit(code: str, output: Path | None) -> None:
    if output is None:
        typer.echo(code)
        return
    output.write_text(code)
    logger.info(f"Program written to {output}")


def _apply_overrides(
    config: DebugConfig, normalize: str | None, step: float | None
) -> DebugConfig:
    try:
        return DebugConfig(
            **{
                **config.__dict__,
                "normalize_mode": normalize or config.normalize_mode,
                "step_edge": config.step_edge if step is None else step,
            }
        )
    except ShaderDebugError as e:
        logger.error(f"Invalid option: {e}")
        raise typer.Exit(1) from e


SHADER_FILE_ARG = typer.Argument(..., help="Shadertoy GLSL file")
LINE_ARG = typer.Argument(..., help="1-based line to debug")


@typed_command(app.command("debug"))
def debug_line(
    shader_file: Path = SHADER_FILE_ARG,
    line: int = LINE_ARG,
    loop_cap: list[str] = typer.Option(
        [], "--loop-cap", "-l", help="Cap loop INDEX at N iterations (INDEX=N)"
    ),
    param: list[str] = typer.Option(
        [], "--param", "-p", help="Override argument INDEX (INDEX=EXPR)"
    ),
    normalize: str | None = typer.Option(
        None, "--normalize", "-n", help="Normalization (off, soft, abs)"
    ),
    step: float | None = typer.Option(None, "--step", help="Threshold edge"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the program here instead of stdout"
    ),
    header: bool = typer.Option(
        False, "--header", help="Prepend a generated-at comment"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level"),
) -> None:
    """Generate the debug program for a line.

    Exits with code 1 when the line has nothing to visualize.

    Example: glsl-debug debug shader.glsl 42 --loop-cap 0=15
    """
    config = _apply_overrides(_configure(log_level), normalize, step)
    source = _read_source(shader_file)
    code = _generate(
        source, line, config, _parse_loop_caps(loop_cap), _parse_pairs(param, "--param")
    )
    if code is None:
        logger.error(f"Nothing to visualize on line {line}")
        raise typer.Exit(1)
    if header:
        code = _header(shader_file, line) + code
    _emit(code, output)


@typed_command(app.command("context"))
def show_context(
    shader_file: Path = SHADER_FILE_ARG,
    line: int = typer.Argument(..., help="1-based line to inspect"),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level"),
) -> None:
    """Print the function around a line as JSON.

    Example: glsl-debug context shader.glsl 12
    """
    _configure(log_level)
    source = _read_source(shader_file)
    index, _ = _source_line(source, line)
    context = extract_function_context(source, index)
    if context is None:
        logger.error(f"Line {line} is not inside a function")
        raise typer.Exit(1)
    typer.echo(json.dumps(context.to_dict(), indent=2))


@typed_command(app.command("postprocess"))
def postprocess(
    shader_file: Path = SHADER_FILE_ARG,
    normalize: str | None = typer.Option(
        None, "--normalize", "-n", help="Normalization (off, soft, abs)"
    ),
    step: float | None = typer.Option(None, "--step", help="Threshold edge"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the program here instead of stdout"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level"),
) -> None:
    """Normalize or threshold the output of a whole program.

    Example: glsl-debug postprocess shader.glsl --normalize soft
    """
    config = _apply_overrides(_configure(log_level), normalize, step)
    source = _read_source(shader_file)
    code = apply_output_post_processing(
        source, config.normalize_mode, config.step_edge
    )
    if code is None:
        logger.error("Nothing to apply: no mode or threshold, or no mainImage")
        raise typer.Exit(1)
    _emit(code, output)


@typed_command(app.command("render-image"))
def render_shader_image(
    shader_file: Path = SHADER_FILE_ARG,
    line: int | None = typer.Argument(
        None, help="1-based line to debug, the whole program when omitted"
    ),
    output: Path = typer.Option(
        Path("debug.png"), "--output", "-o", help="Output image file path"
    ),
    loop_cap: list[str] = typer.Option(
        [], "--loop-cap", "-l", help="Cap loop INDEX at N iterations (INDEX=N)"
    ),
    param: list[str] = typer.Option(
        [], "--param", "-p", help="Override argument INDEX (INDEX=EXPR)"
    ),
    normalize: str | None = typer.Option(
        None, "--normalize", "-n", help="Normalization (off, soft, abs)"
    ),
    step: float | None = typer.Option(None, "--step", help="Threshold edge"),
    width: int | None = typer.Option(None, "--width", "-w", help="Image width"),
    height: int | None = typer.Option(None, "--height", "-h", help="Image height"),
    time_value: float | None = typer.Option(
        None, "--time", help="Time value for the image"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level"),
) -> None:
    """Render a line's debug program, or the whole program, to an image.

    Example: glsl-debug render-image shader.glsl 42 -o debug.png
    """
    config = _apply_overrides(_configure(log_level), normalize, step)
    source = _read_source(shader_file)
    if line is None:
        processed = apply_output_post_processing(
            source, config.normalize_mode, config.step_edge
        )
        code = processed if processed is not None else source
    else:
        code = _generate(
            source,
            line,
            config,
            _parse_loop_caps(loop_cap),
            _parse_pairs(param, "--param"),
        )
        if code is None:
            logger.error(f"Nothing to visualize on line {line}")
            raise typer.Exit(1)

    size = (width or config.width, height or config.height)
    logger.info(f"Rendering still image to {output}...")
    try:
        render_image(
            code,
            size=size,
            time=config.time if time_value is None else time_value,
            output_path=str(output),
        )
    except ShaderDebugError as e:
        logger.error(f"Rendering failed: {e}")
        raise typer.Exit(1) from e
    logger.info(f"Image saved to {output}")


class ShaderChangeHandler(FileSystemEventHandler):  # type: ignore
    """Event handler for shader file changes."""

    def __init__(self, shader_file: str):
        """Initialize shader change handler.

        Args:
            shader_file: Absolute path to the shader file
        """
        self.shader_file = shader_file
        self.needs_reload = True

    def on_modified(self, event: watchdog.events.FileSystemEvent) -> None:
        """Handle file modified event.

        Args:
            event: File system event
        """
        if event.src_path == os.path.abspath(self.shader_file):
            logger.info(f"Detected changes in {self.shader_file}")
            self.needs_reload = True

    def take_reload(self) -> bool:
        if self.needs_reload:
            self.needs_reload = False
            return True
        return False


def _regenerate(
    shader_file: Path,
    line: int,
    config: DebugConfig,
    caps: dict[int, int],
    params: dict[int, str],
    output: Path | None,
) -> None:
    """Regenerate the debug program, logging failures instead of exiting."""
    try:
        code = _generate(shader_file.read_text(), line, config, caps, params)
    except (OSError, typer.Exit) as e:
        logger.error(f"Error regenerating debug program: {e}")
        return
    if code is None:
        logger.warning(f"Nothing to visualize on line {line}")
        return
    _emit(code, output)


@typed_command(app.command("watch"))
def watch_shader(
    shader_file: Path = SHADER_FILE_ARG,
    line: int = LINE_ARG,
    loop_cap: list[str] = typer.Option(
        [], "--loop-cap", "-l", help="Cap loop INDEX at N iterations (INDEX=N)"
    ),
    param: list[str] = typer.Option(
        [], "--param", "-p", help="Override argument INDEX (INDEX=EXPR)"
    ),
    normalize: str | None = typer.Option(
        None, "--normalize", "-n", help="Normalization (off, soft, abs)"
    ),
    step: float | None = typer.Option(None, "--step", help="Threshold edge"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the program here instead of stdout"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level"),
) -> None:
    """Regenerate a line's debug program whenever the file changes.

    Example: glsl-debug watch shader.glsl 42 -o debug.glsl
    """
    config = _apply_overrides(_configure(log_level), normalize, step)
    caps = _parse_loop_caps(loop_cap)
    params = _parse_pairs(param, "--param")

    # Create file system observer for auto-reload
    observer = watchdog.observers.Observer()
    abs_shader_file = os.path.abspath(shader_file)
    handler = ShaderChangeHandler(abs_shader_file)

    # Watch the file's directory, not the file itself
    directory = os.path.dirname(abs_shader_file)
    observer.schedule(handler, path=directory, recursive=False)
    observer.start()

    try:
        logger.info(f"Watching {shader_file} (press Ctrl+C to stop)...")
        while True:
            if handler.take_reload():
                _regenerate(shader_file, line, config, caps, params, output)
            time.sleep(0.1)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, stopping...")
    finally:
        observer.stop()
        observer.join()


if __name__ == "__main__":
    app()
