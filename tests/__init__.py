# TidBum Test Suite
"""
Tests for the TidBum album store.

Repository tests run against a temporary SQLite file; integration tests
drive the same operations through the HTTP surface.
"""
