"""WSGI config for the land administration back office."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'land_admin.settings')

application = get_wsgi_application()
