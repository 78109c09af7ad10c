"""Single-frame countdown renderer.

Draws a LayoutPlan onto a raster surface. The surface is a small capability
interface (measure, fill, draw text) so tests can swap in a recorder that
captures draw calls without rasterizing anything.
"""

import logging
from io import BytesIO
from typing import Callable, Optional, Protocol

from PIL import Image, ImageDraw

from src.components.countdown_errors import RenderingFailure
from src.components.countdown_fonts import FontRegistry, FontSpec, default_registry
from src.components.countdown_layout import (
    DEFAULT_STYLE,
    LayoutPlan,
    LayoutStyle,
    Rect,
    TextMetrics,
    TextPlacement,
    compute_layout,
)
from src.components.countdown_request import RenderRequest
from src.utils.time_utils import breakdown_duration

logger = logging.getLogger(__name__)


class RasterSurface(Protocol):
    def measure_text(self, text: str, font: FontSpec) -> TextMetrics:
        ...

    def fill_rect(self, rect: Rect, color: str) -> None:
        ...

    def draw_text(self, placement: TextPlacement, color: str) -> None:
        ...

    def to_image(self) -> Image.Image:
        ...


SurfaceFactory = Callable[[int, int], RasterSurface]


class PillowSurface:
    """RGB canvas backed by Pillow's ImageDraw."""

    def __init__(self, width: int, height: int, registry: Optional[FontRegistry] = None):
        self._registry = registry or default_registry
        self._image = Image.new('RGB', (width, height))
        self._draw = ImageDraw.Draw(self._image)

    def measure_text(self, text: str, font: FontSpec) -> TextMetrics:
        pil_font = self._registry.get_font(font)
        # Baseline anchor: top is -ascent, bottom is descent
        _, top, _, bottom = pil_font.getbbox(text, anchor='ls')
        return TextMetrics(width=pil_font.getlength(text), ascent=max(0, -top), descent=max(0, bottom))

    def fill_rect(self, rect: Rect, color: str) -> None:
        self._draw.rectangle(
            [rect.x, rect.y, rect.x + rect.width - 1, rect.y + rect.height - 1],
            fill=color,
        )

    def draw_text(self, placement: TextPlacement, color: str) -> None:
        pil_font = self._registry.get_font(placement.font)
        self._draw.text((placement.x, placement.y), placement.text, fill=color, font=pil_font, anchor='mt')

    def to_image(self) -> Image.Image:
        return self._image


def draw_plan(surface: RasterSurface, plan: LayoutPlan, request: RenderRequest) -> None:
    """Issue draw calls in order: background, accent bar, then every text element."""
    surface.fill_rect(plan.background, request.background_color)
    surface.fill_rect(plan.accent_bar, request.accent_color)
    for placement in plan.text_placements():
        surface.draw_text(placement, request.text_color)


def render_frame(request: RenderRequest,
                 now_ms: int,
                 style: LayoutStyle = DEFAULT_STYLE,
                 surface_factory: Optional[SurfaceFactory] = None) -> Image.Image:
    """Render the countdown as it looks at ``now_ms``.

    Raises:
        RenderingFailure: If the surface cannot be created, measured or drawn on
    """
    factory = surface_factory or PillowSurface
    parts = breakdown_duration(request.target_ms - now_ms)
    try:
        surface = factory(style.canvas_width, style.canvas_height)
        plan = compute_layout(surface, request.label, request.sub_label, parts, style)
        draw_plan(surface, plan, request)
        return surface.to_image()
    except RenderingFailure:
        raise
    except Exception as exc:
        logger.error(f"Failed to render countdown frame at {now_ms}: {exc}")
        raise RenderingFailure(f"Failed to render countdown frame: {exc}") from exc


def encode_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    try:
        image.save(buffer, format='PNG')
    except (OSError, ValueError) as exc:
        raise RenderingFailure(f"Failed to encode PNG: {exc}") from exc
    return buffer.getvalue()
