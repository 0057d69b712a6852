"""
Session gate middleware with request tenant context and RLS.

Resolves the session token once per request, publishes the user and the
active company to the tenant context, and sets the RLS parameters for the
request's database work.

ROUTING:
- PUBLIC_PATHS: no session work at all (health checks, static, Django admin)
- Protected pages ("/", /admin/..., /staff/...): anonymous requests are
  redirected to the login page with ``next`` set to the requested path
- Everything else (API, login page): proceeds anonymous or authenticated;
  DRF permission classes decide for API views
"""
import logging

from django.conf import settings
from django.contrib.auth.views import redirect_to_login

from accounts import rls
from accounts.session import resolve_session_user_optional
from tenant.context import clear_tenant_context, set_tenant_context
from tenant.cookies import get_active_company_id


logger = logging.getLogger(__name__)


class SessionGateMiddleware:
    """
    Require a session on page routes and set up request context.

    Flow:
    1. Skip public paths
    2. Resolve the session (header or cookie token)
    3. Redirect anonymous requests for protected pages to login
    4. Set tenant context (user + unvalidated active company)
    5. Set RLS context
    6. Process request
    7. Clear all contexts in finally block
    """

    PUBLIC_PATHS = (
        "/_health/",  # Health checks (Kubernetes probes)
        "/static/",  # Static files
        "/django-admin/",  # Django admin (has its own auth)
    )

    PROTECTED_PREFIXES = (
        "/admin/",
        "/staff/",
    )

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if self._is_public_path(request.path):
            return self.get_response(request)

        user = resolve_session_user_optional(request)

        if user is None and self._is_protected(request.path):
            logger.debug("Anonymous request for protected page", extra={"path": request.path})
            return redirect_to_login(request.get_full_path(), settings.LOGIN_URL)

        company_id = get_active_company_id(request)
        set_tenant_context(
            user_id=str(user.public_id) if user else None,
            company_id=company_id,
        )
        rls.set_rls_context(
            user.pk if user else None,
            company_id,
            bypass=settings.RLS_BYPASS,
        )
        try:
            return self.get_response(request)
        finally:
            rls.clear_rls_context()
            clear_tenant_context()

    def _is_public_path(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.PUBLIC_PATHS)

    def _is_protected(self, path: str) -> bool:
        return path == "/" or any(path.startswith(p) for p in self.PROTECTED_PREFIXES)
