"""
WSGI config for the commission payments backend.

Provided as a fallback for traditional deployments; Docker serves ASGI.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
