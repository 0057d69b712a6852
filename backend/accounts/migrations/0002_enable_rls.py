from django.db import migrations


BYPASS = "current_setting('app.rls_bypass', true) = 'on'"
CURRENT_USER = "NULLIF(current_setting('app.current_user_id', true), '')::bigint"

RLS_POLICIES = {
    "accounts_usercompanyrole": f"{BYPASS} OR user_id = {CURRENT_USER}",
    "accounts_company": (
        f"{BYPASS} OR EXISTS ("
        "SELECT 1 FROM accounts_usercompanyrole r "
        f"WHERE r.company_id = accounts_company.id AND r.user_id = {CURRENT_USER})"
    ),
}


def _enable_rls(apps, schema_editor):
    # Row-level security is a Postgres feature; SQLite dev/test databases skip it.
    if schema_editor.connection.vendor != "postgresql":
        return
    for table, predicate in RLS_POLICIES.items():
        schema_editor.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;")
        schema_editor.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY;")
        schema_editor.execute(f"DROP POLICY IF EXISTS rls_user_access ON {table};")
        schema_editor.execute(
            f"CREATE POLICY rls_user_access ON {table} "
            f"USING ({predicate}) WITH CHECK ({predicate});"
        )


def _disable_rls(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    for table in RLS_POLICIES:
        schema_editor.execute(f"DROP POLICY IF EXISTS rls_user_access ON {table};")
        schema_editor.execute(f"ALTER TABLE {table} NO FORCE ROW LEVEL SECURITY;")
        schema_editor.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY;")


class Migration(migrations.Migration):

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(_enable_rls, _disable_rls),
    ]
