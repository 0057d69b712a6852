"""
Template context for the navigation shell.

Adds the caller's companies (for the switcher), the resolved active
company and whether the caller is Admin there. Anonymous requests get an
empty navigation.
"""
import logging

from accounts.authz import resolve_request_context
from accounts.exceptions import ExternalStoreError, Unauthenticated
from accounts.queries import get_user_companies


logger = logging.getLogger(__name__)


def _navigation(user=None, companies=(), active_company_id=None, is_admin=False):
    return {
        "nav_user": user,
        "nav_companies": list(companies),
        "nav_active_company_id": active_company_id,
        "nav_is_admin": is_admin,
    }


def company_navigation(request):
    try:
        ctx = resolve_request_context(request)
    except Unauthenticated:
        return _navigation()
    except ExternalStoreError:
        logger.warning("Navigation unavailable: role lookup failed", exc_info=True)
        return _navigation()

    try:
        companies = get_user_companies(ctx.user)
    except ExternalStoreError:
        logger.warning("Navigation unavailable: company lookup failed", exc_info=True)
        return _navigation(user=ctx.user)

    return _navigation(
        user=ctx.user,
        companies=companies,
        active_company_id=ctx.resolved_company_id,
        is_admin=ctx.is_admin_for_active_company,
    )
