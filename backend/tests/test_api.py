# tests/test_api.py
"""Session and company API endpoints."""
from unittest import mock

import pytest
from django.conf import settings
from rest_framework.test import APIClient
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.exceptions import ExternalStoreError
from accounts.models import Company, UserCompanyRole


SESSION_COOKIES = (
    "activeCompanyId",
    "sb-access-token",
    "sb-refresh-token",
    "supabase-auth-token",
    "sb-auth-token",
)


def assert_cookies_expired(response):
    for name in SESSION_COOKIES:
        morsel = response.cookies[name]
        assert morsel.value == ""
        assert morsel["max-age"] == 0
        assert morsel["path"] == "/"


@pytest.mark.django_db
class TestLogin:
    def test_sets_token_cookies(self, api_client, user):
        response = api_client.post(
            "/api/auth/login/",
            {"email": "USER@test.com", "password": "testpass123"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["access"]
        assert response.cookies[settings.ACCESS_TOKEN_COOKIE].value == response.data["access"]
        assert response.cookies[settings.ACCESS_TOKEN_COOKIE]["httponly"]
        assert response.cookies[settings.REFRESH_TOKEN_COOKIE].value == response.data["refresh"]

    def test_wrong_password(self, api_client, user):
        response = api_client.post(
            "/api/auth/login/",
            {"email": "user@test.com", "password": "wrong"},
            format="json",
        )
        assert response.status_code == 400
        assert settings.ACCESS_TOKEN_COOKIE not in response.cookies


@pytest.mark.django_db
class TestLogoutAndClear:
    def test_logout_expires_cookies_and_revokes(self, api_client, user, login_cookies):
        login_cookies(api_client, user)

        response = api_client.post("/api/auth/logout/")

        assert response.status_code == 204
        assert_cookies_expired(response)
        assert BlacklistedToken.objects.filter(token__user=user).exists()

    def test_clear_without_next(self, api_client):
        response = api_client.get("/api/auth/clear")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert_cookies_expired(response)

    def test_clear_with_next_redirects(self, api_client):
        response = api_client.get("/api/auth/clear", {"next": "/foo"})

        assert response.status_code == 302
        assert response["Location"] == "/foo"
        assert_cookies_expired(response)

    def test_clear_ignores_offsite_next(self, api_client):
        response = api_client.get("/api/auth/clear", {"next": "https://evil.example/"})

        assert response.status_code == 302
        assert response["Location"] == "/"

    def test_clear_answers_browser_navigation_with_json(self, api_client):
        response = api_client.get("/api/auth/clear", HTTP_ACCEPT="text/html,application/xhtml+xml")

        assert response.status_code == 200
        assert response["Content-Type"].startswith("application/json")
        assert response.json() == {"ok": True}

    def test_cookie_logout_requires_csrf_token(self, user, login_cookies):
        client = APIClient(enforce_csrf_checks=True)
        login_cookies(client, user)

        response = client.post("/api/auth/logout/")

        assert response.status_code == 403
        assert not BlacklistedToken.objects.filter(token__user=user).exists()
        assert "sb-access-token" not in response.cookies

    def test_logout_with_refresh_in_body_skips_csrf(self, user):
        client = APIClient(enforce_csrf_checks=True)
        refresh = RefreshToken.for_user(user)

        response = client.post("/api/auth/logout/", {"refresh": str(refresh)}, format="json")

        assert response.status_code == 204
        assert BlacklistedToken.objects.filter(token__user=user).exists()


@pytest.mark.django_db
class TestActiveCompany:
    def test_get_without_cookie(self, api_client):
        response = api_client.get("/api/active-company")
        assert response.status_code == 200
        assert response.json() == {"activeCompanyId": None}

    def test_get_reads_cookie_verbatim(self, api_client):
        api_client.cookies[settings.ACTIVE_COMPANY_COOKIE] = "anything"
        response = api_client.get("/api/active-company")
        assert response.json() == {"activeCompanyId": "anything"}

    def test_post_sets_cookie(self, bearer_client, officer_user, company):
        company_id = str(company.public_id)

        response = bearer_client(officer_user).post(
            "/api/active-company", {"companyId": company_id}, format="json",
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True, "activeCompanyId": company_id}
        cookie = response.cookies[settings.ACTIVE_COMPANY_COOKIE]
        assert cookie.value == company_id
        assert cookie["httponly"]
        assert cookie["samesite"] == "Lax"
        assert cookie["path"] == "/"

    def test_post_missing_company_id(self, bearer_client, officer_user):
        response = bearer_client(officer_user).post("/api/active-company", {}, format="json")

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "companyId required"}

    def test_post_foreign_company_is_refused(self, bearer_client, officer_user, second_company):
        response = bearer_client(officer_user).post(
            "/api/active-company",
            {"companyId": str(second_company.public_id)},
            format="json",
        )

        assert response.status_code == 403
        assert response.json()["ok"] is False
        assert settings.ACTIVE_COMPANY_COOKIE not in response.cookies

    def test_post_requires_session(self, api_client, company):
        response = api_client.post(
            "/api/active-company", {"companyId": str(company.public_id)}, format="json",
        )
        assert response.status_code == 401


@pytest.mark.django_db
class TestDefaultCompany:
    def test_anonymous_goes_to_login(self, api_client, company):
        response = api_client.get("/api/company/default", {"company_id": str(company.public_id)})
        assert response.status_code == 302
        assert response["Location"] == settings.LOGIN_URL

    def test_selects_and_returns_to_next(self, api_client, officer_user, company, login_cookies):
        login_cookies(api_client, officer_user)

        response = api_client.get(
            "/api/company/default",
            {"company_id": str(company.public_id), "next": "/staff/journals/"},
        )

        assert response.status_code == 302
        assert response["Location"] == "/staff/journals/"
        assert response.cookies[settings.ACTIVE_COMPANY_COOKIE].value == str(company.public_id)

    def test_foreign_company_lands_on_admin_page(self, api_client, officer_user, second_company, login_cookies):
        login_cookies(api_client, officer_user)

        response = api_client.get(
            "/api/company/default", {"company_id": str(second_company.public_id)},
        )

        assert response.status_code == 302
        assert response["Location"] == settings.ADMIN_LANDING_URL
        assert settings.ACTIVE_COMPANY_COOKIE not in response.cookies

    def test_missing_company_id(self, api_client, officer_user, login_cookies):
        login_cookies(api_client, officer_user)
        response = api_client.get("/api/company/default")
        assert response["Location"] == settings.ADMIN_LANDING_URL


@pytest.mark.django_db
class TestMeCompanies:
    def test_anonymous(self, api_client):
        response = api_client.get("/api/me/companies")
        assert response.status_code == 200
        assert response.json() == {"userId": None, "companies": [], "roles": []}

    def test_lists_companies_and_roles(self, bearer_client, admin_user, company):
        response = bearer_client(admin_user).get("/api/me/companies")

        assert response.json() == {
            "userId": str(admin_user.public_id),
            "companies": [{"id": str(company.public_id), "name": "Cocoa Traders Ltd"}],
            "roles": [{"company_id": str(company.public_id), "role": "Admin"}],
        }

    def test_store_failure_degrades_to_empty(self, bearer_client, admin_user):
        with mock.patch(
            "accounts.views.get_user_company_roles",
            side_effect=ExternalStoreError("connection refused"),
        ):
            response = bearer_client(admin_user).get("/api/me/companies")

        assert response.status_code == 200
        assert response.json()["companies"] == []
        assert response.json()["roles"] == []


@pytest.mark.django_db
class TestCompanies:
    def test_list(self, bearer_client, admin_user, company):
        response = bearer_client(admin_user).get("/api/companies/")

        assert response.status_code == 200
        assert response.json() == [
            {"id": str(company.public_id), "name": "Cocoa Traders Ltd", "base_currency": "GHS"},
        ]

    def test_create_with_defaults(self, bearer_client, admin_user):
        response = bearer_client(admin_user).post(
            "/api/companies/", {"name": "Shea Exports"}, format="json",
        )

        assert response.status_code == 201
        created = Company.objects.get(public_id=response.json()["id"])
        assert created.base_currency == settings.DEFAULT_BASE_CURRENCY
        assert created.fy_start_month == settings.DEFAULT_FY_START_MONTH
        assert created.user_roles.get().role == UserCompanyRole.Role.ADMIN

    def test_create_denied_for_non_admin(self, bearer_client, officer_user):
        response = bearer_client(officer_user).post(
            "/api/companies/", {"name": "Shea Exports"}, format="json",
        )

        assert response.status_code == 403
        assert response.json() == {"detail": "Only Admin users can create companies."}
        assert not Company.objects.filter(name="Shea Exports").exists()

    def test_create_requires_name(self, bearer_client, admin_user):
        response = bearer_client(admin_user).post("/api/companies/", {"name": ""}, format="json")

        assert response.status_code == 400
        assert response.json()["name"] == ["Company name is required."]

    def test_requires_session(self, api_client):
        assert api_client.get("/api/companies/").status_code == 401
