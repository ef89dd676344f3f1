"""
WSGI config for the HealthTrack project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'healthtrack.settings')

application = get_wsgi_application()
