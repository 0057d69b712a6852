from django.apps import AppConfig
from django.db.backends.signals import connection_created


class AccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"
    verbose_name = "Accounts, Companies & Roles"

    def ready(self):
        from accounts.rls import bypass_new_connection

        connection_created.connect(bypass_new_connection, dispatch_uid="accounts.rls_bypass")
