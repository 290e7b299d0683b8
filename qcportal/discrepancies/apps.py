from django.apps import AppConfig


class DiscrepanciesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'qcportal.discrepancies'
