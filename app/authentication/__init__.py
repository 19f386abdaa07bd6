"""
Authentication application.

Owns the email-based User model. Commission and payment services only read
the caller's id and ``is_artist``; tokens are issued by simplejwt.

Usage:
    from authentication.models import User
"""
