from django.apps import AppConfig


class LandRegistryConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'land_registry'
    verbose_name = 'Land Registry'
