"""
API module for the quote API.
Provides the FastAPI-based REST API over the quote store.
"""

__all__ = ['app', 'routes', 'models', 'middleware']
