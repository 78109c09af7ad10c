import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Deployment settings are read once at process start. A .env file in the
# project root is loaded first; real environment variables take precedence.
ROOT_DIR = Path(__file__).parent

env_file = ROOT_DIR / '.env'
if env_file.exists():
    load_dotenv(env_file)

DEFAULT_BUCKET_SECONDS = 60
DEFAULT_GIF_FRAMES = 60
MAX_GIF_FRAMES = 120
MAX_GIF_DELAY_CS = 10000


def parse_positive_int(value, fallback, maximum=None):
    """Parse a positive integer from an env string, clamping to ``maximum``.

    Empty, non-numeric, zero and negative values return ``fallback``.
    """
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return fallback
    if number <= 0:
        return fallback
    if maximum and number > maximum:
        return maximum
    return number


def get_config():
    gif_delay_env = os.environ.get("GIF_DELAY_CS")
    return Config(
        allow_animation=os.environ.get("ALLOW_GIF", "true").lower() != "false",
        bucket_seconds=parse_positive_int(os.environ.get("BUCKET_SECONDS"), DEFAULT_BUCKET_SECONDS),
        cache_header=os.environ.get("CACHE_HEADER") or None,
        gif_frame_count=parse_positive_int(os.environ.get("GIF_FRAMES"), DEFAULT_GIF_FRAMES, MAX_GIF_FRAMES),
        gif_delay_cs=parse_positive_int(gif_delay_env, None, MAX_GIF_DELAY_CS) if gif_delay_env else None,
        font_path=os.environ.get("FONT_PATH") or None,
        font_family=os.environ.get("FONT_FAMILY", "CustomFont"),
        animation_workers=parse_positive_int(os.environ.get("ANIMATION_WORKERS"), 1, os.cpu_count() or 1),
        animation_timeout_seconds=parse_positive_int(os.environ.get("ANIMATION_TIMEOUT_SECONDS"), None),
        default_timezone=os.environ.get("DEFAULT_TIMEZONE", "UTC"),
        web_server_port=int(os.environ.get("WEB_SERVER_PORT", "3000")),
        web_server_debug_mode_on=str(os.environ.get("WEB_SERVER_DEBUG_MODE_ON", "False")).lower() == "true",
        log_dir=os.environ.get("LOG_DIR", "logs"),
    )


@dataclass(frozen=True)
class Config:
    """Deployment settings for the countdown image service."""
    allow_animation: bool = True
    bucket_seconds: int = DEFAULT_BUCKET_SECONDS
    # Explicit Cache-Control override; computed from bucket_seconds when None
    cache_header: Optional[str] = None
    gif_frame_count: int = DEFAULT_GIF_FRAMES
    # Per-frame delay in centiseconds; derived from the bucket width when None
    gif_delay_cs: Optional[int] = None
    font_path: Optional[str] = None
    font_family: str = "CustomFont"
    animation_workers: int = 1
    animation_timeout_seconds: Optional[int] = None
    default_timezone: str = "UTC"
    web_server_port: int = 3000
    web_server_debug_mode_on: bool = False
    log_dir: str = "logs"
