# accounts/authentication.py
"""
Token authentication shared by API views and server-rendered pages.

Access tokens are simplejwt access tokens. Browsers carry them in the
``sb-access-token`` cookie; API clients may send ``Authorization: Bearer``.
The header wins when both are present.
"""
from django.conf import settings
from rest_framework import exceptions
from rest_framework.authentication import CSRFCheck
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken


class SessionTokenAuthentication(JWTAuthentication):
    """JWTAuthentication that also accepts the access-token cookie."""

    def get_cookie_token(self, request):
        raw = request.COOKIES.get(settings.ACCESS_TOKEN_COOKIE)
        if not raw:
            return None
        return raw.encode()

    def resolve(self, request):
        """
        Validate the request's token.

        Returns (user, validated_token, from_cookie) or None when the request
        carries no usable token. An invalid header token raises
        AuthenticationFailed; an invalid cookie token is treated as absent so
        stale cookies never lock a browser out of public pages.
        """
        header = self.get_header(request)
        if header is not None:
            raw_token = self.get_raw_token(header)
            if raw_token is None:
                return None
            validated_token = self.get_validated_token(raw_token)
            return self.get_user(validated_token), validated_token, False

        raw_token = self.get_cookie_token(request)
        if raw_token is None:
            return None
        try:
            validated_token = self.get_validated_token(raw_token)
        except InvalidToken:
            return None
        return self.get_user(validated_token), validated_token, True

    def authenticate(self, request):
        result = self.resolve(request)
        if result is None:
            return None

        user, validated_token, from_cookie = result
        if from_cookie:
            # Cookies ride along on cross-site requests; headers do not.
            self.enforce_csrf(request)
        return user, validated_token

    def enforce_csrf(self, request):
        def dummy_get_response(request):  # pragma: no cover
            return None

        check = CSRFCheck(dummy_get_response)
        check.process_request(request)
        reason = check.process_view(request, None, (), {})
        if reason:
            raise exceptions.PermissionDenied(f"CSRF Failed: {reason}")
