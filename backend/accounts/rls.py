"""
PostgreSQL Row-Level Security (RLS) context management.

This module manages PostgreSQL session configuration parameters that
control RLS policies. The parameters are set per-connection and read by
the policies created in accounts/migrations/0002_enable_rls.py.

Parameters set:
- app.current_user_id: The authenticated user's primary key
- app.current_company_id: The active company's public id (informational)
- app.rls_bypass: "on" or "off" to bypass RLS policies

Usage:
    # In middleware
    set_current_user_id(user.pk)
    set_rls_bypass(settings.RLS_BYPASS)

    # Commands that write rows the user cannot see yet (new companies)
    with rls_bypass():
        Company.objects.create(...)

    # Cleanup
    clear_rls_context()
"""
from contextlib import contextmanager
from typing import Optional

from django.conf import settings
from django.db import connection as default_connection


def _set_config(name: str, value: Optional[str], *, conn=None) -> None:
    """
    Set a PostgreSQL session configuration parameter.

    Args:
        name: Parameter name (e.g., "app.current_user_id")
        value: Parameter value, or None to reset
        conn: Database connection to use
    """
    conn = conn or default_connection

    # Skip for non-PostgreSQL databases (SQLite in tests)
    if conn.vendor != "postgresql":
        return

    with conn.cursor() as cursor:
        if value is None:
            cursor.execute(f"RESET {name}")
        else:
            cursor.execute(
                "SELECT set_config(%s, %s, false)",
                [name, value],
            )


def _get_config(name: str, *, conn=None) -> Optional[str]:
    conn = conn or default_connection

    if conn.vendor != "postgresql":
        return None

    with conn.cursor() as cursor:
        cursor.execute("SELECT current_setting(%s, true)", [name])
        row = cursor.fetchone()
    return row[0] if row else None


def set_current_user_id(user_id: Optional[int], *, conn=None) -> None:
    """Set the user whose role rows RLS exposes; None clears it."""
    _set_config(
        "app.current_user_id",
        None if user_id is None else str(user_id),
        conn=conn,
    )


def set_current_company_id(company_id: Optional[str], *, conn=None) -> None:
    _set_config("app.current_company_id", company_id, conn=conn)


def set_rls_bypass(enabled: bool, *, conn=None) -> None:
    """
    Enable or disable RLS bypass.

    When bypass is enabled, RLS policies allow all operations.
    This is used for:
    - Testing environments
    - Provisioning and company creation (the creator has no role row yet)
    """
    _set_config("app.rls_bypass", "on" if enabled else "off", conn=conn)


def is_rls_bypassed(*, conn=None) -> bool:
    return _get_config("app.rls_bypass", conn=conn) == "on"


@contextmanager
def rls_bypass(*, conn=None):
    """
    Context manager to temporarily bypass RLS.

    Saves the previous bypass state and restores it on exit.
    """
    previous = _get_config("app.rls_bypass", conn=conn)
    set_rls_bypass(True, conn=conn)
    try:
        yield
    finally:
        if previous is None:
            _set_config("app.rls_bypass", None, conn=conn)
        else:
            _set_config("app.rls_bypass", previous, conn=conn)


def set_rls_context(user_id: Optional[int], company_id: Optional[str], bypass: bool = False, *, conn=None) -> None:
    """Set all RLS parameters for a request at once."""
    set_current_user_id(user_id, conn=conn)
    set_current_company_id(company_id, conn=conn)
    set_rls_bypass(bypass, conn=conn)


def clear_rls_context(*, conn=None) -> None:
    """
    Clear all RLS-related session parameters.

    Should be called in middleware finally blocks to ensure
    connection state is clean for the next request.
    """
    _set_config("app.current_user_id", None, conn=conn)
    _set_config("app.current_company_id", None, conn=conn)
    _set_config("app.rls_bypass", None, conn=conn)


def bypass_new_connection(sender, connection, **kwargs) -> None:
    """
    ``connection_created`` receiver: when RLS_BYPASS is configured, every
    new connection starts with the bypass on (dev databases, tests).
    """
    if settings.RLS_BYPASS:
        set_rls_bypass(True, conn=connection)
