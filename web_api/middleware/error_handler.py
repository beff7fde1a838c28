import logging
from functools import wraps

from werkzeug.exceptions import HTTPException

from jumper import plug_response

logger = logging.getLogger("jumper.web_api")

ERROR_NUMBERS = {
    400: "4000000",
    404: "4040000",
    405: "4050000",
    413: "4130000",
    500: "5000000",
}


def error_reply(http_code, message, data=None):
    """Write a failed envelope with the given HTTP status."""
    number = ERROR_NUMBERS.get(http_code, f"{http_code}0000")
    res = plug_response().set_http_code(http_code)
    return res.reply_failed(number, f"HTTP_{http_code}", message, data)


def handle_errors(f):
    """Middleware for consistent API error handling."""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error in {f.__name__}: {str(e)}")

            # Different error message based on environment
            if logger.getEffectiveLevel() <= logging.DEBUG:
                # In debug mode, include the full error message
                return error_reply(500, f"Internal server error: {str(e)}")
            else:
                # In production, show a generic message
                return error_reply(500, "Internal server error")

    return decorated_function


def register_error_handlers(app):
    """Register global error handlers for the Flask app."""

    @app.errorhandler(404)
    def not_found(e):
        return error_reply(404, "Endpoint not found")

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_reply(405, "Method not allowed")

    @app.errorhandler(413)
    def too_large(e):
        return error_reply(413, "Request body too large")

    @app.errorhandler(500)
    def server_error(e):
        return error_reply(500, "Internal server error")
