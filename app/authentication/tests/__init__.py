"""
Tests for authentication app.

This package contains test modules for:
- test_managers.py: UserManager user and superuser creation

Usage:
    pytest authentication/tests/
"""
