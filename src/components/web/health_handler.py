"""Health Check Handler for the countdown web server."""

import logging
import os
from datetime import datetime
from typing import Any, Dict

import pytz

from src.components.countdown_fonts import default_registry

logger = logging.getLogger(__name__)


def get_server_health(server_start_time: datetime, web_server_port: int,
                      request_environ: Dict[str, Any] = None) -> Dict[str, Any]:
    """Lightweight health probe for load balancers / monitoring.

    Args:
        server_start_time: When the server started (timezone-aware)
        web_server_port: Configured web server port
        request_environ: Optional WSGI environ of the probing request

    Returns:
        Dictionary with health status information
    """
    current_time = datetime.now(pytz.utc)
    uptime_seconds = int((current_time - server_start_time).total_seconds())
    uptime_str = f"{uptime_seconds // 3600}h {(uptime_seconds % 3600) // 60}m"

    environ = request_environ or {}
    server_software = environ.get('SERVER_SOFTWARE', 'unknown')
    server_port = environ.get('SERVER_PORT') or web_server_port

    return {
        "ok": True,
        "status": "ok",
        "timestamp": current_time.strftime('%Y-%m-%d %H:%M:%S %Z'),
        "service": "countdown_image_service",
        "fonts_registered": default_registry.is_registered,
        "server": {
            'server_type': _detect_server_type(server_software),
            'server_software': server_software,
            'host': environ.get('SERVER_NAME', 'unknown'),
            'port': int(server_port),
            'start_time': server_start_time.strftime('%Y-%m-%d %H:%M:%S %Z'),
            'uptime': uptime_str,
            'uptime_seconds': uptime_seconds,
            'pid': os.getpid(),
        },
    }


def _detect_server_type(server_software: str) -> str:
    """Detect server type from SERVER_SOFTWARE string."""
    server_software_lower = (server_software or '').lower()
    if 'waitress' in server_software_lower:
        return 'waitress'
    if 'gunicorn' in server_software_lower:
        return 'gunicorn'
    if 'werkzeug' in server_software_lower:
        return 'flask-dev'
    return 'unknown'
