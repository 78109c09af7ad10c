"""Web application package for the countdown image service.

Provides the Flask app in web_server.py. Run with:
    python -m web.web_server
"""

__all__ = ["web_server"]
