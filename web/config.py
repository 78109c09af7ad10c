"""Web server configuration and shared resources."""

from my_config import get_config

CONFIG = get_config()

# Server configuration constants
USE_DEBUG_MODE = CONFIG.web_server_debug_mode_on
WEB_SERVER_PORT = CONFIG.web_server_port
