# backend/asgi.py
"""
PATH: backend/asgi.py

ASGI entrypoint. Stock operations are synchronous; this only exists so the
project can be served by an ASGI server as well.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_asgi_application()
