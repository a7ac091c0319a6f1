from django.apps import AppConfig

class CartConfig(AppConfig):
    # Full module path
    name = 'gadgetstore.cart'
    label = 'cart'
    verbose_name = 'Shopping Carts'
    default_auto_field = 'django.db.models.BigAutoField'
