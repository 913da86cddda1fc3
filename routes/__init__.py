"""
Flask route blueprints for PrintU Kiosk.

- print_api: /api/print (status, cancel, submit page)

Each blueprint is registered with the Flask app in create_app().
"""

from .print_api import print_api_bp

__all__ = [
    "print_api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(print_api_bp)
