"""
ASGI config for the SecureHealth project.

Plain HTTP only; the API has no WebSocket endpoints.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "securehealth.settings")

application = get_asgi_application()
