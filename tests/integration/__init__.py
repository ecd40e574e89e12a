# Integration Tests
"""
Integration tests drive complete album workflows through the HTTP API.

Principle: Test behavior, not implementation.
"""
