# accounts/urls.py
"""
URL configuration for the session and company API.

Endpoints:
- /auth/ - Login, logout, cookie clearing
- /active-company - Read or change the active company cookie
- /company/default - Select a default company and redirect back
- /me/companies - The caller's companies and roles
- /companies/ - List and create companies
"""

from django.urls import path

from .views import (
    # Auth
    LoginView,
    LogoutView,
    ClearAuthView,
    # Active company
    ActiveCompanyView,
    DefaultCompanyView,
    # Companies
    MeCompaniesView,
    CompanyListCreateView,
)

app_name = "accounts"

urlpatterns = [
    # ==========================================================================
    # Authentication
    # ==========================================================================
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/clear", ClearAuthView.as_view(), name="auth-clear"),

    # ==========================================================================
    # Active company
    # ==========================================================================
    path("active-company", ActiveCompanyView.as_view(), name="active-company"),
    path("company/default", DefaultCompanyView.as_view(), name="company-default"),

    # ==========================================================================
    # Companies
    # ==========================================================================
    path("me/companies", MeCompaniesView.as_view(), name="me-companies"),
    path("companies/", CompanyListCreateView.as_view(), name="company-list"),
]
