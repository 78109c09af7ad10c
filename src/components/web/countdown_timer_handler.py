"""Countdown Timer Handler for Web Dashboard.

Turns raw query parameters into a finished HTTP-ready result: the image
bytes, content type and cache headers. HTTP framing stays in the route.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from my_config import Config
from src.components.countdown_animation import GifEncoder, build_countdown_gif
from src.components.countdown_errors import AnimationTimeout, InvalidInput
from src.components.countdown_fonts import register_fonts
from src.components.countdown_layout import DEFAULT_STYLE, LayoutStyle
from src.components.countdown_renderer import SurfaceFactory, encode_png, render_frame
from src.components.countdown_request import RenderRequest, sanitize_query
from src.utils.time_utils import bucket_now, now_ms

logger = logging.getLogger(__name__)

TARGET_USAGE_MESSAGE = 'Provide target query param as an ISO date, e.g. 2024-12-31T23:59:59Z'
RENDER_FAILURE_MESSAGE = 'Failed to render countdown image'

BUCKET_HEADER = 'X-Countdown-Bucket'
CACHE_BUST_HEADER = 'X-Countdown-CB'


@dataclass
class CountdownResponse:
    status: int
    headers: Dict[str, str]
    body: bytes = b''
    json_body: Optional[Dict[str, Any]] = None
    bucket: Optional[int] = None
    used_animation: bool = False
    cache_bust: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status < 400


def compute_cache_header(config: Config) -> str:
    """Cache-Control for rendered images: the configured override, else one bucket at the edge."""
    if config.cache_header:
        return config.cache_header
    return f"public, max-age=0, s-maxage={max(1, config.bucket_seconds)}, stale-while-revalidate=30"


def rejected_response() -> CountdownResponse:
    return CountdownResponse(
        status=400,
        headers={'Content-Type': 'application/json', 'Cache-Control': 'no-store'},
        json_body={'error': TARGET_USAGE_MESSAGE},
    )


def _render_static(request: RenderRequest, bucket: int, style, surface_factory) -> bytes:
    return encode_png(render_frame(request, bucket, style, surface_factory))


def build_countdown_response(query: Mapping[str, Any],
                             config: Optional[Config] = None,
                             current_ms: Optional[int] = None,
                             style: LayoutStyle = DEFAULT_STYLE,
                             surface_factory: Optional[SurfaceFactory] = None,
                             encoder: Optional[GifEncoder] = None) -> CountdownResponse:
    """Build the countdown image response for one request.

    Args:
        query: Raw query parameters (string or list-of-string values)
        config: Deployment settings; defaults apply when None
        current_ms: Wall clock in epoch ms, read from the system clock when None
        style: Layout parameters
        surface_factory: Raster surface capability, Pillow when None
        encoder: Animation encoder capability, Pillow GIF when None

    Returns:
        CountdownResponse with status 400 for an invalid target, else 200

    Raises:
        RenderingFailure: If drawing or encoding fails
    """
    config = config or Config()

    try:
        request = sanitize_query(query, config.default_timezone)
    except InvalidInput as val_err:
        logger.info(f"Rejected countdown request: {val_err}")
        return rejected_response()

    register_fonts(config.font_path, config.font_family)

    bucket = bucket_now(now_ms() if current_ms is None else current_ms, config.bucket_seconds)
    use_animation = request.animated and config.allow_animation
    if request.animated and not config.allow_animation:
        logger.debug("Animation requested but disabled for this deployment, rendering PNG")

    if use_animation:
        try:
            body = build_countdown_gif(
                request,
                bucket,
                frame_count=config.gif_frame_count,
                delay_cs=config.gif_delay_cs,
                bucket_seconds=config.bucket_seconds,
                style=style,
                surface_factory=surface_factory,
                encoder=encoder,
                workers=config.animation_workers,
                timeout_seconds=config.animation_timeout_seconds,
            )
        except AnimationTimeout as timeout_err:
            logger.warning(f"Animation exceeded its deadline, falling back to PNG: {timeout_err}")
            use_animation = False
            body = _render_static(request, bucket, style, surface_factory)
    else:
        body = _render_static(request, bucket, style, surface_factory)

    headers = {
        'Content-Type': 'image/gif' if use_animation else 'image/png',
        'Cache-Control': compute_cache_header(config),
        BUCKET_HEADER: str(bucket),
    }
    if request.cache_bust:
        headers[CACHE_BUST_HEADER] = request.cache_bust

    return CountdownResponse(
        status=200,
        headers=headers,
        body=body,
        bucket=bucket,
        used_animation=use_animation,
        cache_bust=request.cache_bust,
    )
