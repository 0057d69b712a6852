# accounts/pages.py
"""
Server-rendered pages: landing redirect, admin company list, staff
journals landing, login and logout.

Every page resolves a RequestContext up front and works from it.
"""
import logging

from django.conf import settings
from django.contrib.auth.views import redirect_to_login
from django.shortcuts import redirect, render
from django.views import View

from accounts.authz import (
    default_company_redirect,
    landing_url,
    require_admin_anywhere,
    resolve_request_context,
)
from accounts.commands import create_company
from accounts.exceptions import ExternalStoreError, Unauthenticated
from accounts.queries import get_user_companies
from accounts.serializers import CompanyCreateSerializer, LoginSerializer
from accounts.session import revoke_refresh_token
from accounts.views import safe_next_url
from ops.schema_cache import SCHEMA_CACHE_BANNER_MESSAGE, is_schema_cache_error
from tenant.cookies import clear_session_cookies, set_auth_cookies


logger = logging.getLogger(__name__)

NO_COMPANY_ACCESS_MESSAGE = "No company access yet."


def _first_error(errors) -> str:
    """Flatten DRF serializer errors to the first message."""
    if isinstance(errors, dict):
        for value in errors.values():
            return _first_error(value)
    if isinstance(errors, (list, tuple)) and errors:
        return _first_error(errors[0])
    return str(errors)


class ContextPageView(View):
    """
    Base for pages that need the caller's RequestContext.

    Unauthenticated callers go to the login page. A store error that looks
    like a schema migration in progress renders the "schema updating"
    banner; any other store error propagates.
    """

    def dispatch(self, request, *args, **kwargs):
        try:
            self.ctx = resolve_request_context(request)
            return super().dispatch(request, *args, **kwargs)
        except Unauthenticated:
            return redirect_to_login(request.get_full_path(), settings.LOGIN_URL)
        except ExternalStoreError as exc:
            if not is_schema_cache_error(exc):
                raise
            logger.warning("Schema cache error on page", extra={"path": request.path})
            return render(
                request,
                "accounts/schema_updating.html",
                {"banner_message": SCHEMA_CACHE_BANNER_MESSAGE},
                status=503,
            )


class HomeView(ContextPageView):
    def get(self, request):
        return redirect(landing_url(self.ctx))


class CompaniesPageView(ContextPageView):
    template_name = "accounts/companies.html"

    def get(self, request):
        return self._render(request)

    def post(self, request):
        require_admin_anywhere(self.ctx)

        serializer = CompanyCreateSerializer(data=request.POST)
        if not serializer.is_valid():
            return self._render(request, error=_first_error(serializer.errors), status=400)

        data = serializer.validated_data
        result = create_company(
            self.ctx,
            name=data["name"],
            base_currency=data["base_currency"],
            fy_start_month=data["fy_start_month"],
        )
        if not result.success:
            return self._render(request, error=result.error, status=400)

        return redirect(settings.ADMIN_LANDING_URL)

    def _render(self, request, error=None, status=200):
        is_admin = self.ctx.is_admin_anywhere
        context = {
            "is_admin_anywhere": is_admin,
            "companies": get_user_companies(self.ctx.user) if is_admin else [],
            "error": error,
            "form_values": request.POST if request.method == "POST" else {},
            "default_base_currency": settings.DEFAULT_BASE_CURRENCY,
            "default_fy_start_month": settings.DEFAULT_FY_START_MONTH,
        }
        return render(request, self.template_name, context, status=status)


class StaffJournalsView(ContextPageView):
    template_name = "accounts/journals.html"

    def get(self, request):
        if not self.ctx.has_company_access:
            return render(request, self.template_name, {
                "no_access_message": NO_COMPANY_ACCESS_MESSAGE,
            })

        redirect_url = default_company_redirect(self.ctx, request.get_full_path())
        if redirect_url:
            return redirect(redirect_url)

        company_id = self.ctx.resolved_company_id
        company = next(
            (c for c in get_user_companies(self.ctx.user) if c.id == company_id),
            None,
        )
        return render(request, self.template_name, {
            "company": company,
            "roles": self.ctx.roles_for(company_id),
        })


class LoginPageView(View):
    template_name = "accounts/login.html"

    def get(self, request):
        return render(request, self.template_name, {"next": request.GET.get("next", "")})

    def post(self, request):
        next_url = request.POST.get("next", "")
        serializer = LoginSerializer(data=request.POST, context={"request": request})
        if not serializer.is_valid():
            return render(
                request,
                self.template_name,
                {"next": next_url, "error": "Invalid email or password."},
                status=400,
            )

        tokens = serializer.validated_data
        response = redirect(safe_next_url(request, next_url))
        set_auth_cookies(response, tokens["access"], tokens["refresh"])
        return response


class LogoutPageView(View):
    def post(self, request):
        revoke_refresh_token(request.COOKIES.get(settings.REFRESH_TOKEN_COOKIE))

        response = redirect(settings.LOGIN_URL)
        clear_session_cookies(response)
        return response
