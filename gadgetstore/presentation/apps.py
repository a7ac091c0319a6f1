from django.apps import AppConfig

class PresentationConfig(AppConfig):
    name = 'gadgetstore.presentation'
    label = 'presentation'
    verbose_name = 'REST API'
