from django.apps import AppConfig


class AirQualityConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.airquality'
    verbose_name = 'Air Quality Service'
