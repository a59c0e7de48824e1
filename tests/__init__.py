"""
Quote API Test Suite
====================

This package contains tests for the Quote API including:
- Unit tests for the store, query engine, API layer and utilities
- Integration tests for startup loading, the HTTP surface and the CLI
"""
