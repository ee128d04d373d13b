"""
Tagfolio Test Suite

Tests are organized into:
- unit/: Unit tests for storage, search, identity and config
- integration/: Integration tests for the HTTP API
"""
