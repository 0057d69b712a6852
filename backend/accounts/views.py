from django.conf import settings
from django.http import HttpResponseRedirect
from django.utils.http import url_has_allowed_host_and_scheme
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import (
    build_request_context,
    require_admin_anywhere,
    resolve_request_context,
)
from accounts.commands import create_company, switch_active_company
from accounts.exceptions import ExternalStoreError
from accounts.queries import get_user_companies, get_user_company_roles
from accounts.session import get_authenticator, revoke_refresh_token
from accounts.serializers import (
    ActiveCompanySerializer,
    CompanyCreateSerializer,
    CompanyRoleSerializer,
    CompanySummarySerializer,
    LoginSerializer,
)
from accounts.throttles import LoginThrottle
from tenant.cookies import (
    clear_session_cookies,
    get_active_company_id,
    set_active_company_cookie,
    set_auth_cookies,
)


def safe_next_url(request, next_url, fallback="/"):
    """Only follow redirect targets on this host."""
    if next_url and url_has_allowed_host_and_scheme(
        next_url,
        allowed_hosts={request.get_host()},
        require_https=request.is_secure(),
    ):
        return next_url
    return fallback


# =============================================================================
# Authentication
# =============================================================================

class LoginView(APIView):
    authentication_classes = ()
    permission_classes = [permissions.AllowAny]
    throttle_classes = [LoginThrottle]

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        tokens = serializer.validated_data

        response = Response(
            {"access": tokens["access"], "refresh": tokens["refresh"]},
            status=status.HTTP_200_OK,
        )
        set_auth_cookies(response, tokens["access"], tokens["refresh"])
        return response


class LogoutView(APIView):
    """Blacklist the refresh token and drop every session cookie."""

    authentication_classes = ()
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        raw_token = request.data.get("refresh")
        if not raw_token and any(name in request.COOKIES for name in settings.AUTH_COOKIE_NAMES):
            # Cookie-driven logout: a cross-site form must not end the session.
            get_authenticator().enforce_csrf(request)
            raw_token = request.COOKIES.get(settings.REFRESH_TOKEN_COOKIE)

        revoke_refresh_token(raw_token)

        response = Response(status=status.HTTP_204_NO_CONTENT)
        clear_session_cookies(response)
        return response


class ClearAuthView(APIView):
    """
    GET /api/auth/clear[?next=/path]

    Expires the active company and auth cookies. Redirects to ``next`` when
    given, otherwise answers {"ok": true}.
    """

    authentication_classes = ()
    permission_classes = [permissions.AllowAny]

    def get(self, request, *args, **kwargs):
        next_url = request.query_params.get("next")
        if next_url:
            response = HttpResponseRedirect(safe_next_url(request, next_url))
        else:
            response = Response({"ok": True})

        clear_session_cookies(response)
        return response


# =============================================================================
# Active company
# =============================================================================

class ActiveCompanyView(APIView):
    def get_permissions(self):
        if self.request.method == "GET":
            return [permissions.AllowAny()]
        return super().get_permissions()

    def get(self, request, *args, **kwargs):
        return Response({"activeCompanyId": get_active_company_id(request)})

    def post(self, request, *args, **kwargs):
        serializer = ActiveCompanySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"ok": False, "error": "companyId required"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        company_id = serializer.validated_data["companyId"]

        ctx = resolve_request_context(request)
        result = switch_active_company(ctx, company_id)
        if not result.success:
            return Response(
                {"ok": False, "error": result.error},
                status=status.HTTP_403_FORBIDDEN,
            )

        response = Response({"ok": True, "activeCompanyId": company_id})
        set_active_company_cookie(response, company_id)
        return response


class DefaultCompanyView(APIView):
    """
    GET /api/company/default?company_id=...&next=...

    Selects a company the user belongs to and returns to ``next``. Anything
    that cannot be selected lands on the admin company list instead.
    """

    permission_classes = [permissions.AllowAny]

    def get(self, request, *args, **kwargs):
        if not request.user or not request.user.is_authenticated:
            return HttpResponseRedirect(settings.LOGIN_URL)

        company_id = request.query_params.get("company_id")
        if not company_id:
            return HttpResponseRedirect(settings.ADMIN_LANDING_URL)

        ctx = build_request_context(request.user, get_active_company_id(request))
        result = switch_active_company(ctx, company_id)
        if not result.success:
            return HttpResponseRedirect(settings.ADMIN_LANDING_URL)

        response = HttpResponseRedirect(
            safe_next_url(request, request.query_params.get("next"))
        )
        set_active_company_cookie(response, company_id)
        return response


# =============================================================================
# Companies
# =============================================================================

class MeCompaniesView(APIView):
    """
    The caller's identity, companies and roles.

    Anonymous callers and store failures both get empty lists; this
    endpoint feeds the company switcher and must never break the page.
    """

    permission_classes = [permissions.AllowAny]

    def get(self, request, *args, **kwargs):
        user = request.user
        if not user or not user.is_authenticated:
            return Response({"userId": None, "companies": [], "roles": []})

        user_id = str(user.public_id)
        try:
            roles = get_user_company_roles(user)
            companies = get_user_companies(user) if roles else []
        except ExternalStoreError:
            return Response({"userId": user_id, "companies": [], "roles": []})

        return Response({
            "userId": user_id,
            "companies": [{"id": c.id, "name": c.name} for c in companies],
            "roles": CompanyRoleSerializer(
                [r._asdict() for r in roles], many=True
            ).data,
        })


class CompanyListCreateView(APIView):
    """
    GET  /api/companies/  companies the caller can access
    POST /api/companies/  create a company (Admin of any company only)
    """

    def get(self, request, *args, **kwargs):
        companies = get_user_companies(request.user)
        return Response(
            CompanySummarySerializer([c._asdict() for c in companies], many=True).data
        )

    def post(self, request, *args, **kwargs):
        ctx = resolve_request_context(request)
        require_admin_anywhere(ctx)

        serializer = CompanyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_company(
            ctx,
            name=serializer.validated_data["name"],
            base_currency=serializer.validated_data["base_currency"],
            fy_start_month=serializer.validated_data["fy_start_month"],
        )
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        company = result.data["company"]
        return Response(
            CompanySummarySerializer(company._asdict()).data,
            status=status.HTTP_201_CREATED,
        )
