"""Utility routes: usage text, health, countdown image."""

from datetime import datetime

import pytz
from flask import Blueprint, Response, current_app, jsonify, request

from src.components.countdown_errors import RenderingFailure
from src.components.web import countdown_timer_handler, health_handler
from src.utils.logging_utils import log_web_activity

utilities_bp = Blueprint('utilities', __name__)


def _countdown_config():
    return current_app.config['COUNTDOWN_CONFIG']


@utilities_bp.route("/")
def usage():
    """Plain-text usage for humans poking at the service."""
    config = _countdown_config()
    lines = [
        'Countdown image service',
        'Usage:',
        '/countdown?target=2024-12-31T23:59:59Z&label=Sale%20ends%20in&accent=%23f472b6&bg=%230f172a&animated=1',
        f"Cache-Control: {countdown_timer_handler.compute_cache_header(config)}",
        f"GIF allowed: {str(config.allow_animation).lower()}",
        f"Bucket seconds: {config.bucket_seconds}",
    ]
    return Response('\n'.join(lines), mimetype='text/plain')


@utilities_bp.route("/healthz")
def healthz():
    """Lightweight health probe endpoint for load balancers / monitoring."""
    try:
        server_start_time = current_app.config.get('SERVER_START_TIME', datetime.now(pytz.utc))
        health = health_handler.get_server_health(
            server_start_time,
            _countdown_config().web_server_port,
            request.environ
        )
        return jsonify(health), 200
    except Exception as exc:
        current_app.logger.error(f"Health check failed: {exc}", exc_info=True)
        return jsonify({"ok": False, "status": "error", "error": str(exc)}), 500


@utilities_bp.route('/countdown')
@log_web_activity
def countdown():
    """Render a countdown PNG (or looping GIF) for emails and web pages."""
    try:
        result = countdown_timer_handler.build_countdown_response(
            request.args.to_dict(flat=False),
            _countdown_config(),
        )
    except RenderingFailure as render_err:
        current_app.logger.error(f"Countdown rendering failed: {render_err}", exc_info=True)
        return jsonify({'error': countdown_timer_handler.RENDER_FAILURE_MESSAGE}), 500
    except Exception as exc:
        current_app.logger.error(f"Unexpected error generating countdown: {exc}", exc_info=True)
        return jsonify({'error': countdown_timer_handler.RENDER_FAILURE_MESSAGE}), 500

    if not result.ok:
        response = jsonify(result.json_body)
        response.status_code = result.status
        response.headers.update(result.headers)
        return response

    return Response(result.body, status=result.status, headers=result.headers)
