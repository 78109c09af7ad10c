"""Animated countdown assembly.

Renders a run of frames that advance from a bucketed base instant and
encodes them as an endlessly looping GIF. With the default delay one loop of
the animation spans exactly one cache bucket, so every request that lands in
the same bucket gets byte-identical output.

Dependencies:
    - Pillow (PIL)
"""

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional, Protocol, Sequence

from PIL import Image

from src.components.countdown_errors import AnimationTimeout, RenderingFailure
from src.components.countdown_layout import DEFAULT_STYLE, LayoutStyle
from src.components.countdown_renderer import SurfaceFactory, render_frame
from src.components.countdown_request import RenderRequest

logger = logging.getLogger(__name__)

DEFAULT_FRAME_COUNT = 60
DEFAULT_BUCKET_SECONDS = 60
MS_PER_CENTISECOND = 10


@dataclass(frozen=True)
class RasterFrame:
    """One rendered frame plus how long it stays on screen."""
    image: Image.Image
    delay_cs: int

    @property
    def size(self):
        return self.image.size


class GifEncoder(Protocol):
    def encode(self, frames: Sequence[RasterFrame], loop: int = 0) -> bytes:
        ...


class PillowGifEncoder:
    """Encodes frames with Pillow's GIF writer."""

    def encode(self, frames: Sequence[RasterFrame], loop: int = 0) -> bytes:
        if not frames:
            raise RenderingFailure("Cannot encode an animation without frames")

        size = frames[0].size
        for index, frame in enumerate(frames):
            if frame.size != size:
                raise RenderingFailure(f"Frame {index} is {frame.size}, expected {size}")

        images = [frame.image for frame in frames]
        buffer = BytesIO()
        try:
            images[0].save(
                buffer,
                format='GIF',
                save_all=True,
                append_images=images[1:],
                duration=[frame.delay_cs * MS_PER_CENTISECOND for frame in frames],
                loop=loop,
            )
        except (OSError, ValueError) as exc:
            raise RenderingFailure(f"Failed to encode GIF: {exc}") from exc
        return buffer.getvalue()


def resolve_delay_cs(bucket_seconds: int, frame_count: int, delay_cs: Optional[int] = None) -> int:
    """Per-frame delay in centiseconds.

    An explicit delay wins. Otherwise the delay is spread so that
    ``frame_count * delay`` covers one bucket window.
    """
    if delay_cs:
        return delay_cs
    spread = max(1, bucket_seconds) * 100 / max(1, frame_count)
    return max(1, int(math.floor(spread + 0.5)))


def frame_instants(base_ms: int, frame_count: int, delay_cs: int) -> List[int]:
    return [base_ms + index * delay_cs * MS_PER_CENTISECOND for index in range(frame_count)]


def _assemble_sequential(request, instants, delay_cs, style, surface_factory, deadline):
    frames = []
    for instant in instants:
        if deadline is not None and time.monotonic() > deadline:
            raise AnimationTimeout(f"Rendered {len(frames)}/{len(instants)} frames before the deadline")
        frames.append(RasterFrame(render_frame(request, instant, style, surface_factory), delay_cs))
    return frames


def _assemble_parallel(request, instants, delay_cs, style, surface_factory, workers, timeout_seconds):
    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = {
            executor.submit(render_frame, request, instant, style, surface_factory): index
            for index, instant in enumerate(instants)
        }
        done, not_done = wait(futures, timeout=timeout_seconds)
        if not_done:
            raise AnimationTimeout(f"Rendered {len(done)}/{len(instants)} frames before the deadline")

        # Frames finish out of order; put them back by index
        images = [None] * len(instants)
        for future, index in futures.items():
            images[index] = future.result()
        return [RasterFrame(image, delay_cs) for image in images]
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def assemble_frames(request: RenderRequest,
                    base_ms: int,
                    frame_count: int = DEFAULT_FRAME_COUNT,
                    delay_cs: int = 100,
                    style: LayoutStyle = DEFAULT_STYLE,
                    surface_factory: Optional[SurfaceFactory] = None,
                    workers: int = 1,
                    timeout_seconds: Optional[float] = None) -> List[RasterFrame]:
    """Render ``frame_count`` frames, frame i showing the countdown at base + i * delay.

    Raises:
        AnimationTimeout: If ``timeout_seconds`` elapses before every frame is rendered
        RenderingFailure: If any frame fails to render
    """
    instants = frame_instants(base_ms, max(1, frame_count), delay_cs)
    if workers > 1:
        return _assemble_parallel(request, instants, delay_cs, style, surface_factory, workers, timeout_seconds)

    deadline = time.monotonic() + timeout_seconds if timeout_seconds else None
    return _assemble_sequential(request, instants, delay_cs, style, surface_factory, deadline)


def build_countdown_gif(request: RenderRequest,
                        base_ms: int,
                        frame_count: int = DEFAULT_FRAME_COUNT,
                        delay_cs: Optional[int] = None,
                        bucket_seconds: int = DEFAULT_BUCKET_SECONDS,
                        style: LayoutStyle = DEFAULT_STYLE,
                        surface_factory: Optional[SurfaceFactory] = None,
                        encoder: Optional[GifEncoder] = None,
                        workers: int = 1,
                        timeout_seconds: Optional[float] = None) -> bytes:
    """Render and encode a looping countdown GIF starting at ``base_ms``."""
    effective_delay_cs = resolve_delay_cs(bucket_seconds, frame_count, delay_cs)
    logger.debug(f"Generating {frame_count} frames at {effective_delay_cs}cs from {base_ms}")

    frames = assemble_frames(request, base_ms, frame_count, effective_delay_cs, style,
                             surface_factory, workers, timeout_seconds)
    gif_bytes = (encoder or PillowGifEncoder()).encode(frames, loop=0)
    logger.info(f"Generated countdown GIF: {len(frames)} frames, {len(gif_bytes)} bytes")
    return gif_bytes
