"""
ASGI config for the HealthTrack project.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'healthtrack.settings')

application = get_asgi_application()
