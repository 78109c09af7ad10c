#!/usr/bin/python3

# Standard library imports
import logging
import os
import sys
from datetime import datetime

_CURRENT_DIR = os.path.dirname(__file__)
_PROJECT_ROOT = os.path.abspath(os.path.join(_CURRENT_DIR, '..'))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

# Third-party imports
import pytz
from flask import Flask, abort

from my_config import Config
from src.components.countdown_fonts import register_fonts
from src.utils.logging_utils import is_scanner_request, setup_logging
from web.config import CONFIG, USE_DEBUG_MODE, WEB_SERVER_PORT
from web.routes import register_all_blueprints

logger = logging.getLogger(__name__)


def create_app(config: Config = None) -> Flask:
    """Build the Flask app around a resolved deployment config."""
    config = config or CONFIG
    flask_app = Flask(__name__)
    flask_app.config['COUNTDOWN_CONFIG'] = config
    flask_app.config['ACTIVITY_LOG_DIR'] = config.log_dir
    flask_app.config['SERVER_START_TIME'] = datetime.now(pytz.utc)
    register_all_blueprints(flask_app)

    @flask_app.before_request
    def block_scanners():
        """Reject scanner traffic before it reaches a route or the activity log."""
        if is_scanner_request():
            abort(404)

    return flask_app


app = create_app()


def main():
    setup_logging(
        app_name='web_server',
        log_level=logging.INFO,
        log_dir=CONFIG.log_dir,
        info_modules=['__main__', 'src.components.web.countdown_timer_handler'],
    )
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('waitress').setLevel(logging.WARNING)

    logger.warning("=" * 100)
    logger.warning(f"COUNTDOWN SERVER STARTED - {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.warning("=" * 100)

    # Register fonts up front so the first request doesn't pay for discovery
    register_fonts(CONFIG.font_path, CONFIG.font_family)

    host = '0.0.0.0'
    print(f"Attempting to start web server on http://{host}:{WEB_SERVER_PORT}")

    if USE_DEBUG_MODE:
        print("Using Flask dev server with auto-reload (debug mode)")
        try:
            app.run(debug=True, host=host, port=WEB_SERVER_PORT, threaded=True, use_reloader=True)
        except OSError as exc:
            _handle_port_error(exc, WEB_SERVER_PORT)
    else:
        from waitress import serve
        print("Using Waitress WSGI server for production deployment")
        try:
            serve(app, host=host, port=WEB_SERVER_PORT, threads=20, channel_timeout=120)
        except OSError as exc:
            _handle_port_error(exc, WEB_SERVER_PORT)


def _handle_port_error(exc, port):
    """Print a helpful message for port-related startup errors, then re-raise."""
    if port < 1024 and exc.errno == 13:
        print(f"\n{'=' * 70}")
        print(f"ERROR: Port {port} requires elevated privileges (sudo/root).")
        print("Use a different port in .env: WEB_SERVER_PORT=3000")
        print(f"{'=' * 70}\n")
    elif exc.errno in (48, 98):
        print(f"\n{'=' * 70}")
        print(f"ERROR: Port {port} is already being used by another process.")
        print(f"  1. Find the process: sudo lsof -i :{port}")
        print("  2. Stop the process using the port")
        print("  3. Or use a different port in .env: WEB_SERVER_PORT=3000")
        print(f"{'=' * 70}\n")
    raise exc


if __name__ == "__main__":
    main()
