"""Route handlers for the web API.

This package contains route handlers organized by functionality:
- demo.py: Routes exercising the request adapter and response envelope
"""
