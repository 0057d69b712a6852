from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    # Operations endpoints (no auth required)
    path("_health/", include("ops.urls")),

    # Django admin lives off /admin/ so the company admin pages can own it
    path("django-admin/", admin.site.urls),
    path("api/", include("accounts.urls")),

    # Server-rendered pages
    path("", include("accounts.page_urls")),
]
