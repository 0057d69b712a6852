from django.apps import AppConfig
from django.conf import settings
from django.core.checks import Error, register


class TenantConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "tenant"
    verbose_name = "Active Company Context"

    def ready(self):
        register(check_cookie_settings)


def check_cookie_settings(app_configs, **kwargs):
    """
    The clear/logout flows expire every name in AUTH_COOKIE_NAMES; the
    access and refresh cookies must be among them or logout leaves a
    live session behind.
    """
    errors = []
    names = set(getattr(settings, "AUTH_COOKIE_NAMES", ()))
    for setting_name in ("ACCESS_TOKEN_COOKIE", "REFRESH_TOKEN_COOKIE"):
        value = getattr(settings, setting_name, None)
        if value not in names:
            errors.append(
                Error(
                    f"{setting_name}={value!r} is not listed in AUTH_COOKIE_NAMES.",
                    hint="Add it so logout expires the cookie.",
                    id="tenant.E001",
                )
            )
    return errors
