"""WSGI config for the digest queue service."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "digest_service.settings")

application = get_wsgi_application()
