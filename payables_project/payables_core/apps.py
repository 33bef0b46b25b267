from django.apps import AppConfig


class PayablesCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payables_core"

    # ensure receivers are registered
    def ready(self):
        import payables_core.signals  # noqa: F401
