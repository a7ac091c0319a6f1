"""
WSGI config for the gadgetstore project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gadgetstore.settings')

application = get_wsgi_application()
