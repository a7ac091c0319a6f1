# gadgetstore/core/apps.py

from django.apps import AppConfig

class CoreConfig(AppConfig):
    name = 'gadgetstore.core'
    label = 'core'
    verbose_name = 'Entities and Business Logic (Core)'
    # Holds no models; only the wait_for_db management command lives here.
    default_auto_field = 'django.db.models.BigAutoField'
