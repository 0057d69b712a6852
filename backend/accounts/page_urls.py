from django.urls import path

from accounts.pages import (
    CompaniesPageView,
    HomeView,
    LoginPageView,
    LogoutPageView,
    StaffJournalsView,
)

app_name = "pages"

urlpatterns = [
    path("", HomeView.as_view(), name="home"),
    path("admin/companies/", CompaniesPageView.as_view(), name="admin-companies"),
    path("staff/journals/", StaffJournalsView.as_view(), name="staff-journals"),
    path("login/", LoginPageView.as_view(), name="login"),
    path("logout/", LogoutPageView.as_view(), name="logout"),
]
