import os
import sys
import pytest
from flask import Flask

# Add the project root to the path for proper imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from web_api import create_app

# Bare Flask app for building request contexts
@pytest.fixture
def flask_app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app

# Fully configured demo app, defaults only
@pytest.fixture
def app(tmp_path):
    app = create_app(str(tmp_path / "missing_config.yaml"))
    app.config["TESTING"] = True
    return app

@pytest.fixture
def client(app):
    return app.test_client()
