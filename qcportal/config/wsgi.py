"""
WSGI config for the QC portal.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'qcportal.config.settings')

application = get_wsgi_application()
