"""Web server route blueprints."""

from .utilities import utilities_bp

__all__ = [
    'utilities_bp',
]


def register_all_blueprints(app):
    """Register all route blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(utilities_bp)
