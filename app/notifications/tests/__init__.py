"""
Tests for notifications app.

This package contains test modules for:
- test_services.py: NotificationService, notify() and delivery task tests

Usage:
    pytest notifications/tests/
"""
