from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import Company, User, UserCompanyRole


class UserCompanyRoleInline(admin.TabularInline):
    model = UserCompanyRole
    extra = 0
    autocomplete_fields = ("company",)


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password", "name")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "name", "password1", "password2")}),
    )
    list_display = ("email", "name", "is_staff")
    search_fields = ("email", "name")
    ordering = ("email",)
    inlines = (UserCompanyRoleInline,)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("name", "base_currency", "fy_start_month", "created_at")
    search_fields = ("name",)
    readonly_fields = ("public_id", "created_at")


@admin.register(UserCompanyRole)
class UserCompanyRoleAdmin(admin.ModelAdmin):
    list_display = ("user", "company", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("user__email", "company__name")
