"""
ASGI config for the commission payments backend.

Exposes the ASGI callable as a module-level variable named ``application``.
Served by Uvicorn in Docker.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_asgi_application()
