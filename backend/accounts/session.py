# accounts/session.py
"""
Session resolver.

Turns request-scoped credentials into an authenticated user. Every
company-scoped operation starts here:

    user = resolve_session_user(request)   # raises Unauthenticated

The token authenticator is created once per process on first use and
reused for every request afterwards.
"""
import logging
import threading
from typing import Optional

from rest_framework.exceptions import AuthenticationFailed
from rest_framework.request import Request
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.authentication import SessionTokenAuthentication
from accounts.exceptions import Unauthenticated


logger = logging.getLogger(__name__)


_authenticator: Optional[SessionTokenAuthentication] = None
_authenticator_lock = threading.Lock()

_SESSION_USER_ATTR = "_session_user"


def get_authenticator() -> SessionTokenAuthentication:
    """Return the process-wide authenticator, creating it exactly once."""
    global _authenticator
    if _authenticator is None:
        with _authenticator_lock:
            if _authenticator is None:
                _authenticator = SessionTokenAuthentication()
    return _authenticator


def resolve_session_user(request):
    """
    Return the authenticated user for this request.

    The result is cached on the request so the middleware, views and
    template context processors share one token validation.

    Raises:
        Unauthenticated: no token, an invalid/expired token, or a token
            for an unknown or inactive user.
    """
    cached = getattr(request, _SESSION_USER_ATTR, None)
    if cached is not None:
        return cached

    # DRF already ran SessionTokenAuthentication for API views.
    if isinstance(request, Request) and request.user.is_authenticated:
        return request.user

    try:
        result = get_authenticator().resolve(request)
    except AuthenticationFailed as exc:
        raise Unauthenticated("Session is invalid or has expired.") from exc

    if result is None:
        raise Unauthenticated()

    user = result[0]
    setattr(request, _SESSION_USER_ATTR, user)
    return user


def resolve_session_user_optional(request):
    """Same as resolve_session_user() but returns None when unauthenticated."""
    try:
        return resolve_session_user(request)
    except Unauthenticated:
        return None


def revoke_refresh_token(raw_token: Optional[str]) -> bool:
    """
    Blacklist a refresh token so it cannot mint new access tokens.

    Returns False when there was no token or it was already invalid.
    """
    if not raw_token:
        return False
    try:
        RefreshToken(raw_token).blacklist()
    except TokenError:
        logger.info("Logout with an invalid refresh token")
        return False

    logger.info("Refresh token revoked")
    return True
