from django.apps import AppConfig

class InfrastructureConfig(AppConfig):
    name = 'gadgetstore.infrastructure'
    label = 'infrastructure'
    verbose_name = 'Accounts and Infrastructure'
    default_auto_field = 'django.db.models.BigAutoField'
