from django.apps import AppConfig


class ExcusesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'excuses'
    verbose_name = 'Excuses and appeals'
