import logging
import os
import sys
import re
from typing import Optional

# Global logger instance
_logger = None

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# ANSI color codes for pretty printing
COLORS = {
    "reset": "\033[0m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "light_black": "\033[90m",
    "bold": "\033[1m",
}

class ColoredFormatter(logging.Formatter):
    """Custom formatter that colorizes log messages based on level."""

    LEVEL_COLORS = {
        logging.DEBUG: COLORS["light_black"],
        logging.INFO: COLORS["green"],
        logging.WARNING: COLORS["yellow"],
        logging.ERROR: COLORS["red"],
        logging.CRITICAL: COLORS["bold"] + COLORS["red"]
    }

    def format(self, record):
        """Format log record with colorized level and message."""
        levelname = record.levelname
        message = super().format(record)

        # Check if we already have ANSI color codes in the message
        if any(color in message for color in COLORS.values()):
            return message

        # Check for embedded color directives in format: [color:text]
        def repl(match):
            color_name = match.group(1).lower()
            text = match.group(2)
            if color_name in COLORS:
                return f"{COLORS[color_name]}{text}{COLORS['reset']}"
            return match.group(0)

        message = re.sub(r'\[(\w+):([^\]]+)\]', repl, message)

        # Apply color based on log level
        color = self.LEVEL_COLORS.get(record.levelno, COLORS["reset"])
        formatted_level = f"{color}{levelname}{COLORS['reset']}"

        # Replace the original level name with the colored version
        return message.replace(levelname, formatted_level, 1)

def setup_logger(log_level: str = "INFO", log_file: Optional[str] = None, enable_colors: bool = True,
                 name: str = "jumper", force: bool = False) -> logging.Logger:
    """Set up and configure the logger shared by the library and the demo app.

    The first call wins unless ``force`` is set, in which case the existing
    handlers are closed and replaced.
    """
    global _logger

    if _logger is not None:
        if not force:
            return _logger
        reset_logger()

    level = getattr(logging, str(log_level).upper(), logging.INFO)

    # Create logger
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Clear any existing handlers
    if logger.handlers:
        logger.handlers.clear()

    # Create console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    # Create formatter based on color preference
    if enable_colors:
        formatter = ColoredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    else:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Add file handler if log_file is specified
    if log_file:
        # Ensure the directory exists
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        # Use non-colored formatter for file logging
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    _logger = logger
    return logger

def get_logger() -> logging.Logger:
    """Get the global logger instance, initializing it if necessary."""
    global _logger

    if _logger is None:
        _logger = setup_logger()

    return _logger

def reset_logger() -> None:
    """Forget the configured logger so the next setup_logger call reconfigures it."""
    global _logger

    if _logger is not None:
        for handler in list(_logger.handlers):
            _logger.removeHandler(handler)
            handler.close()
    _logger = None
