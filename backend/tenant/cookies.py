"""
Active-company and auth cookie plumbing.

The active company is a per-browser preference stored in the
``activeCompanyId`` cookie. Reading it never checks membership; writers
are expected to have validated the selection first.
"""
from typing import Optional

from django.conf import settings


def get_active_company_id(request) -> Optional[str]:
    """Return the persisted active company id, or None if absent/empty."""
    value = request.COOKIES.get(settings.ACTIVE_COMPANY_COOKIE)
    return value or None


def set_active_company_cookie(response, company_id: str) -> None:
    response.set_cookie(
        settings.ACTIVE_COMPANY_COOKIE,
        str(company_id),
        path="/",
        httponly=True,
        samesite="Lax",
        secure=settings.AUTH_COOKIE_SECURE,
    )


def expire_cookie(response, name: str) -> None:
    """Overwrite a cookie with an empty value that expires immediately."""
    response.set_cookie(name, "", max_age=0, path="/")


def clear_session_cookies(response) -> None:
    """
    Expire the active company selection and every auth token cookie.

    Used by logout and the clear-auth endpoint.
    """
    expire_cookie(response, settings.ACTIVE_COMPANY_COOKIE)
    for name in settings.AUTH_COOKIE_NAMES:
        expire_cookie(response, name)


def set_auth_cookies(response, access: str, refresh: Optional[str] = None) -> None:
    """Persist freshly issued tokens in the auth cookies."""
    jwt_settings = settings.SIMPLE_JWT
    response.set_cookie(
        settings.ACCESS_TOKEN_COOKIE,
        access,
        max_age=int(jwt_settings["ACCESS_TOKEN_LIFETIME"].total_seconds()),
        path="/",
        httponly=True,
        samesite="Lax",
        secure=settings.AUTH_COOKIE_SECURE,
    )
    if refresh is not None:
        response.set_cookie(
            settings.REFRESH_TOKEN_COOKIE,
            refresh,
            max_age=int(jwt_settings["REFRESH_TOKEN_LIFETIME"].total_seconds()),
            path="/",
            httponly=True,
            samesite="Lax",
            secure=settings.AUTH_COOKIE_SECURE,
        )
