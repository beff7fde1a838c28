#!/usr/bin/env python3

import argparse
import os

from web_api import create_app


def parse_args():
    parser = argparse.ArgumentParser(description="Run the jumper demo web API")
    parser.add_argument("--config", default=os.environ.get("JUMPER_CONFIG"), help="Path to a YAML config file")
    parser.add_argument("--host", help="Interface to bind (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on (overrides config and PORT)")
    parser.add_argument("--debug", action="store_true", help="Run Flask in debug mode")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    app = create_app(args.config)
    server = app.config["JUMPER"]["server"]

    port = args.port or int(os.environ.get("PORT", server["port"]))
    app.run(debug=args.debug or server["debug"], host=args.host or server["host"], port=port)
