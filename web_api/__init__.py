"""Demo web API wiring the jumper request/response helpers into Flask."""

import os
import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from utils.config import load_config, apply_config
from utils.logger import setup_logger

from web_api.middleware.error_handler import register_error_handlers
from web_api.routes import demo

def create_app(config_path: Optional[str] = None):
    """Create and configure the Flask application."""
    config = load_config(config_path)

    # Initialize logging
    logging_config = config["logging"]
    logger = setup_logger(
        os.environ.get("JUMPER_LOG_LEVEL", logging_config["level"]),
        logging_config.get("file"),
        logging_config.get("colors", True),
        force=True,
    )

    app = Flask(__name__)
    app.config["JUMPER"] = config
    apply_config(app, config)

    # Enable CORS for the configured origins
    cors_config = config["server"]["cors"]
    CORS(
        app,
        origins=cors_config["origins"],
        allow_headers=cors_config["allow_headers"],
        methods=cors_config["methods"],
    )

    # Register error handlers
    register_error_handlers(app)

    # Register route handlers
    demo.register_routes(app)

    logger.debug(f"Registered {len(list(app.url_map.iter_rules()))} routes")
    logging.getLogger('jumper.web_api').info("Demo web API ready")

    return app
