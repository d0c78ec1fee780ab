"""
WSGI config for CivicPulse Backend.

Exposes the WSGI callable as a module-level variable named ``application``.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'civicpulse_backend.settings')

application = get_wsgi_application()
