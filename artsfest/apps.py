from django.apps import AppConfig


class ArtsfestConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "artsfest"
    verbose_name = "Arts Festival"
