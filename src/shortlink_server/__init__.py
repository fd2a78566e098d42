"""Standalone HTTP server for the short-link service."""

from .app_factory import create_app, read_body, to_response

__all__ = ['create_app', 'read_body', 'to_response']
