"""Offscreen preview of Shadertoy programs.

The generated debug program only defines `mainImage`. Rendering wraps it in
a complete fragment shader declaring the Shadertoy uniforms, draws a
fullscreen quad into a standalone framebuffer and reads the pixels back.
"""

from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass

import arrow
import moderngl
import numpy as np
from loguru import logger
from PIL import Image

from glsl_debug.engine.errors import RenderError, ShaderCompileError

GL_VERSION = 330

VERTEX_SHADER = """
#version 330 core
in vec2 in_position;
out vec2 vs_uv;
void main() {
    vs_uv = (in_position + 1.0) * 0.5;
    gl_Position = vec4(in_position, 0.0, 1.0);
}
"""

FRAGMENT_HEADER = """#version 330 core
uniform vec3 iResolution;
uniform float iTime;
uniform float iTimeDelta;
uniform int iFrame;
uniform vec4 iMouse;
uniform vec4 iDate;
uniform float iSampleRate;
uniform sampler2D iChannel0;
uniform sampler2D iChannel1;
uniform sampler2D iChannel2;
uniform sampler2D iChannel3;
uniform float iChannelTime[4];
uniform vec3 iChannelResolution[4];
in vec2 vs_uv;
out vec4 fs_color;
"""

FRAGMENT_FOOTER = """
void main() {
    vec4 color = vec4(0.0, 0.0, 0.0, 1.0);
    mainImage(color, gl_FragCoord.xy);
    fs_color = color;
}
"""

# Type for uniform values (single value or vector)
UniformValue = float | int | tuple[float, ...]


def wrap_shadertoy_source(source: str) -> str:
    """Turn a Shadertoy program into a complete fragment shader."""
    return f"{FRAGMENT_HEADER}\n{source}\n{FRAGMENT_FOOTER}"


@dataclass
class RenderContext:
    """Holds all OpenGL resources for rendering one program."""

    ctx: moderngl.Context
    program: moderngl.Program
    vbo: moderngl.Buffer
    vao: moderngl.VertexArray
    fbo: moderngl.Framebuffer


@dataclass
class FrameParams:
    """Parameters for rendering a single frame.

    Attributes:
        size: Framebuffer size as (width, height)
        time: Value of iTime
        frame_num: Value of iFrame
        mouse: Value of iMouse
    """

    size: tuple[int, int]
    time: float = 0.0
    frame_num: int = 0
    mouse: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)


def shadertoy_uniforms(params: FrameParams) -> dict[str, UniformValue]:
    """Values of the Shadertoy built-in uniforms for a frame."""
    now = arrow.now()
    seconds = now.hour * 3600 + now.minute * 60 + now.second + now.microsecond / 1e6
    width, height = params.size
    return {
        "iResolution": (float(width), float(height), 1.0),
        "iTime": params.time,
        "iTimeDelta": 1.0 / 60.0,
        "iFrame": params.frame_num,
        "iMouse": params.mouse,
        "iDate": (float(now.year), float(now.month), float(now.day), seconds),
        "iSampleRate": 44100.0,
    }


def _create_context() -> moderngl.Context:
    try:
        return moderngl.create_context(standalone=True, require=GL_VERSION)
    except Exception as e:
        raise RenderError(f"Could not create an OpenGL context: {e}") from e


def _compile_program(ctx: moderngl.Context, source: str) -> moderngl.Program:
    """Compile a Shadertoy program.

    Raises:
        ShaderCompileError: If the driver rejects the program
    """
    try:
        program = ctx.program(
            vertex_shader=VERTEX_SHADER,
            fragment_shader=wrap_shadertoy_source(source),
        )
    except moderngl.Error as e:
        logger.error("Shader compilation error")
        raise ShaderCompileError(str(e)) from e
    logger.debug(f"Available uniforms: {list(program)}")
    return program


def _setup_primitives(
    ctx: moderngl.Context, program: moderngl.Program
) -> tuple[moderngl.Buffer, moderngl.VertexArray]:
    """Create vertex buffer and vertex array."""
    vertices = np.array([-1.0, -1.0, 1.0, -1.0, -1.0, 1.0, 1.0, 1.0], dtype="f4")
    vbo = ctx.buffer(vertices)
    vao = ctx.simple_vertex_array(program, vbo, "in_position")
    return vbo, vao


@contextmanager
def _setup_rendering_context(
    source: str, size: tuple[int, int]
) -> Generator[RenderContext, None, None]:
    """Sets up all rendering resources and cleans them up when done.

    Args:
        source: Shadertoy program
        size: Framebuffer size as (width, height)

    Yields:
        RenderContext object containing all rendering resources
    """
    ctx = _create_context()
    try:
        program = _compile_program(ctx, source)
        vbo, vao = _setup_primitives(ctx, program)
        fbo = ctx.simple_framebuffer(size)
    except Exception:
        ctx.release()
        raise
    render_ctx = RenderContext(ctx=ctx, program=program, vbo=vbo, vao=vao, fbo=fbo)

    try:
        yield render_ctx
    finally:
        render_ctx.fbo.release()
        render_ctx.vao.release()
        render_ctx.vbo.release()
        render_ctx.program.release()
        render_ctx.ctx.release()


def _render_frame(render_ctx: RenderContext, params: FrameParams) -> np.ndarray:
    """Render a single frame and return its pixels, top row first."""
    render_ctx.fbo.use()
    render_ctx.ctx.clear(0.0, 0.0, 0.0, 1.0)

    for name, value in shadertoy_uniforms(params).items():
        if name in render_ctx.program:
            render_ctx.program[name].value = value

    render_ctx.vao.render(moderngl.TRIANGLE_STRIP)

    data = render_ctx.fbo.read(components=4, dtype="f1")
    img = np.frombuffer(data, dtype=np.uint8).reshape(params.size[1], params.size[0], 4)

    # OpenGL has Y=0 at the bottom, image formats at the top
    return np.flipud(img)


def render_image(
    source: str,
    size: tuple[int, int] = (800, 450),
    time: float = 0.0,
    output_path: str | None = None,
    image_format: str = "PNG",
) -> Image.Image:
    """Render a Shadertoy program to a PIL Image.

    Args:
        source: Shadertoy program defining mainImage
        size: Image size as (width, height)
        time: Value of iTime
        output_path: Path to save the image, if desired
        image_format: Format to save the image in (e.g., "PNG", "JPEG")

    Returns:
        PIL Image containing the rendered image

    Raises:
        RenderError: If no OpenGL context is available
        ShaderCompileError: If the program does not compile
    """
    logger.info("Rendering to image")
    with _setup_rendering_context(source, size) as render_ctx:
        array = _render_frame(render_ctx, FrameParams(size=size, time=time))
        image = Image.fromarray(array)
        if output_path:
            image.save(output_path, format=image_format)
            logger.info(f"Image saved to {output_path}")
        return image
