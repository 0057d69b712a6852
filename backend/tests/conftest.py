# tests/conftest.py
"""
Pytest fixtures for the session, company and role tests.

Tokens are real simplejwt tokens; cookie-based sessions go through the
same authenticator the browser path uses.
"""
import pytest
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import Company, UserCompanyRole


User = get_user_model()

Role = UserCompanyRole.Role


@pytest.fixture(autouse=True)
def _rls_bypass(db):
    """Keep RLS bypass enabled for tests using the default connection."""
    from accounts import rls
    from django.db import connection

    rls.set_rls_bypass(True, conn=connection)


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


# =============================================================================
# Company & User Fixtures
# =============================================================================

@pytest.fixture
def make_user(db):
    def _make_user(email, password="testpass123", **extra):
        return User.objects.create_user(email=email, password=password, **extra)
    return _make_user


@pytest.fixture
def make_company(db):
    def _make_company(name, base_currency="GHS", fy_start_month=10):
        return Company.objects.create(
            name=name,
            base_currency=base_currency,
            fy_start_month=fy_start_month,
        )
    return _make_company


@pytest.fixture
def grant(db):
    def _grant(user, company, role):
        return UserCompanyRole.objects.create(user=user, company=company, role=role)
    return _grant


@pytest.fixture
def company(make_company):
    return make_company("Cocoa Traders Ltd")


@pytest.fixture
def second_company(make_company):
    return make_company("Second Company", base_currency="USD", fy_start_month=1)


@pytest.fixture
def user(make_user):
    """A user with no company access."""
    return make_user("user@test.com", name="Test User")


@pytest.fixture
def admin_user(make_user, company, grant):
    """Admin of `company`."""
    user = make_user("admin@test.com", name="Test Admin")
    grant(user, company, Role.ADMIN)
    return user


@pytest.fixture
def officer_user(make_user, company, grant):
    """AccountsOfficer of `company`."""
    user = make_user("officer@test.com", name="Test Officer")
    grant(user, company, Role.ACCOUNTS_OFFICER)
    return user


# =============================================================================
# Token & Client Fixtures
# =============================================================================

def access_token_for(user) -> str:
    return str(RefreshToken.for_user(user).access_token)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def login_cookies():
    """Put a user's tokens in a test client's cookie jar, as a browser would."""
    def _login_cookies(client, user, active_company=None):
        refresh = RefreshToken.for_user(user)
        client.cookies[settings.ACCESS_TOKEN_COOKIE] = str(refresh.access_token)
        client.cookies[settings.REFRESH_TOKEN_COOKIE] = str(refresh)
        if active_company is not None:
            client.cookies[settings.ACTIVE_COMPANY_COOKIE] = str(active_company.public_id)
        return refresh
    return _login_cookies


@pytest.fixture
def bearer_client(api_client):
    """An APIClient authenticated with an Authorization header."""
    def _bearer_client(user):
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access_token_for(user)}")
        return api_client
    return _bearer_client


@pytest.fixture
def token_for():
    return access_token_for
