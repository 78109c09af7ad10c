"""Shared fixtures for countdown rendering tests.

Provides:
- RecordingSurface: raster surface double that records draw calls
- sample render requests and deployment configs
- a Flask test client wired to a fresh app
"""

from datetime import datetime

import pytest
import pytz
from PIL import Image

from my_config import Config
from src.components.countdown_layout import TextMetrics
from src.components.countdown_request import RenderRequest


class RecordingSurface:
    """Surface double: fixed-width glyphs, optional heights, every draw call recorded.

    With ``height_less=True`` it reports zero ascent/descent like a mock
    backend, so layout falls back to nominal font sizes.
    """

    def __init__(self, width, height, height_less=True):
        self.width = width
        self.height = height
        self.height_less = height_less
        self.calls = []

    def measure_text(self, text, font):
        if self.height_less:
            return TextMetrics(width=len(text) * font.size * 0.5, ascent=0, descent=0)
        # Height grows with text length so sampling the wrong string shows up as jitter
        return TextMetrics(width=len(text) * font.size * 0.5, ascent=font.size * 0.7 + len(text), descent=3)

    def fill_rect(self, rect, color):
        self.calls.append(('fill', rect, color))

    def draw_text(self, placement, color):
        self.calls.append(('text', placement, color))

    def to_image(self):
        return Image.new('RGB', (self.width, self.height))


class SurfaceRecorder:
    """Surface factory that keeps every surface it hands out."""

    def __init__(self, height_less=True):
        self.height_less = height_less
        self.surfaces = []

    def __call__(self, width, height):
        surface = RecordingSurface(width, height, self.height_less)
        self.surfaces.append(surface)
        return surface


@pytest.fixture
def surface_recorder():
    return SurfaceRecorder()


@pytest.fixture
def target():
    return datetime(2024, 12, 31, 23, 59, 59, tzinfo=pytz.utc)


@pytest.fixture
def render_request(target):
    return RenderRequest(target=target, label='Sale ends in', sub_label='Shop now')


@pytest.fixture
def one_day_before_ms(target):
    """2024-12-30T23:59:59Z in epoch ms."""
    return int(target.timestamp() * 1000) - 86400 * 1000


@pytest.fixture
def small_gif_config():
    return Config(gif_frame_count=3, bucket_seconds=3)


@pytest.fixture
def app(tmp_path):
    from web.web_server import create_app

    flask_app = create_app(Config(gif_frame_count=3, bucket_seconds=3, log_dir=str(tmp_path)))
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
