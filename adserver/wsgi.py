"""
WSGI config for the adserver project.

It exposes the WSGI callable as a module-level variable named ``application``.
Each request runs in its own worker thread; the delivery engine keeps no
state between requests beyond the database.
"""

import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "adserver.settings.local")

application = get_wsgi_application()
