import copy
import logging
import os
import yaml
from typing import Dict, Any, Optional

DEFAULT_CONFIG = {
    "server": {
        "host": "0.0.0.0",
        "port": 9999,
        "debug": False,
        "cors": {
            "origins": "*",
            "allow_headers": ["Content-Type", "Authorization"],
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE"],
        },
    },
    "request": {
        "max_content_length": None,  # bytes, None for unlimited
        "max_form_memory_size": 500000,  # bytes per non-file form field
        "max_form_parts": 1000,
        "multipart_memory": 32 << 10,  # uploads spool to disk past this size
        "trust_proxy_headers": False,
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "colors": True,
    },
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from file or use defaults."""
    logger = logging.getLogger("jumper")
    config_path = config_path or os.environ.get("JUMPER_CONFIG", "config/config.yaml")

    if os.path.exists(config_path):
        try:
            with open(config_path, "r") as f:
                config = yaml.safe_load(f) or {}
            if not isinstance(config, dict):
                logger.error(f"Configuration in {config_path} must be a mapping, got {type(config).__name__}")
                logger.info("Using default configuration")
                return copy.deepcopy(DEFAULT_CONFIG)
            logger.info(f"Loaded configuration from {config_path}")

            # Merge with defaults to ensure all required fields exist
            merged_config = copy.deepcopy(DEFAULT_CONFIG)
            _deep_merge(merged_config, config)
            return merged_config
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading configuration: {str(e)}")
            logger.info("Using default configuration")
            return copy.deepcopy(DEFAULT_CONFIG)

    logger.info(
        f"Configuration file {config_path} not found, using default configuration"
    )

    return copy.deepcopy(DEFAULT_CONFIG)


def apply_config(app, config: Dict[str, Any]) -> None:
    """Map the request section onto the Flask config keys the request adapter reads."""
    request_config = config.get("request", {})
    app.config["MAX_CONTENT_LENGTH"] = request_config.get("max_content_length")
    app.config["MAX_FORM_MEMORY_SIZE"] = request_config.get("max_form_memory_size")
    app.config["MAX_FORM_PARTS"] = request_config.get("max_form_parts")
    app.config["JUMPER_MULTIPART_MEMORY"] = request_config.get("multipart_memory")
    app.config["JUMPER_TRUST_PROXY_HEADERS"] = bool(request_config.get("trust_proxy_headers"))


def _deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, updating target with values from source."""
    for key, value in source.items():
        if key in target and isinstance(target[key], dict) and isinstance(value, dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value
    return target
