"""
Request tenant context using contextvars for async-safety.

Holds the user and active company resolved for the current request so
that code outside the view (RLS setup, log records) can read them
without the request object.

Usage:
    # In middleware, once the session is resolved
    set_tenant_context(user_id="6f1c...", company_id="a2b4...")

    # In application code
    company_id = get_current_company_id()

    # Context manager for explicit scoping (management commands, tests)
    with tenant_context(user_id=..., company_id=...):
        ...

The company id here is whatever the active-company cookie carried; it is
NOT validated against the user's roles. Membership checks belong to
accounts.authz.
"""
from contextvars import ContextVar
from contextlib import contextmanager
from typing import Optional, NamedTuple


class TenantContext(NamedTuple):
    """Immutable tenant context for a request."""

    user_id: Optional[str]
    company_id: Optional[str]


# None means no request context (system operations)
_current_tenant: ContextVar[Optional[TenantContext]] = ContextVar(
    "current_tenant",
    default=None,
)


def get_current_tenant() -> Optional[TenantContext]:
    """
    Get the current tenant context.

    Returns None if no tenant context is set (e.g., during system operations
    or before middleware has processed the request).
    """
    return _current_tenant.get()


def get_current_company_id() -> Optional[str]:
    """Get the active company id of the current request, if any."""
    ctx = _current_tenant.get()
    return ctx.company_id if ctx else None


def get_current_user_id() -> Optional[str]:
    """Get the authenticated user id of the current request, if any."""
    ctx = _current_tenant.get()
    return ctx.user_id if ctx else None


def set_tenant_context(user_id: Optional[str], company_id: Optional[str]) -> None:
    """
    Set the current tenant context.

    Called by middleware after the session token has been validated.
    """
    _current_tenant.set(TenantContext(user_id=user_id, company_id=company_id))


def clear_tenant_context() -> None:
    """
    Clear the current tenant context.

    Called by middleware in finally block to ensure cleanup.
    """
    _current_tenant.set(None)


@contextmanager
def tenant_context(user_id: Optional[str], company_id: Optional[str]):
    """
    Context manager for setting tenant context.

    Automatically restores previous context on exit (even on exception).
    """
    token = _current_tenant.set(TenantContext(user_id=user_id, company_id=company_id))
    try:
        yield
    finally:
        _current_tenant.reset(token)
