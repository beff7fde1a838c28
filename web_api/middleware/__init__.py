"""Middleware components for the web API.

This package contains middleware for cross-cutting concerns:
- error_handler.py: Centralized error handling with failed envelopes
"""
