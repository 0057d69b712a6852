# tests/test_commands.py
"""Company commands: creation, switching and role provisioning."""
import logging
from unittest import mock

import pytest
from django.db import IntegrityError

from accounts.authz import build_request_context
from accounts.commands import create_company, grant_company_role, switch_active_company
from accounts.exceptions import ExternalStoreError, Unauthorized
from accounts.models import Company, UserCompanyRole


Role = UserCompanyRole.Role


@pytest.mark.django_db
class TestCreateCompany:
    def test_creates_company_and_admin_role(self, admin_user, company):
        ctx = build_request_context(admin_user, str(company.public_id))

        result = create_company(ctx, name="  New Co  ", base_currency="usd", fy_start_month=1)

        assert result.success
        summary = result.data["company"]
        created = Company.objects.get(public_id=summary.id)
        assert created.name == "New Co"
        assert created.base_currency == "USD"
        assert created.fy_start_month == 1
        assert UserCompanyRole.objects.filter(
            user=admin_user, company=created, role=Role.ADMIN,
        ).exists()

    def test_admin_of_another_company_may_create(self, make_user, company, second_company, grant):
        user = make_user("mixed@test.com")
        grant(user, company, Role.ADMIN)
        grant(user, second_company, Role.AUDITOR)
        ctx = build_request_context(user, str(second_company.public_id))

        assert create_company(ctx, "Third Co", "GHS", 10).success

    def test_non_admin_is_rejected_before_any_write(self, officer_user, company):
        ctx = build_request_context(officer_user, str(company.public_id))
        before = Company.objects.count()

        with pytest.raises(Unauthorized) as excinfo:
            create_company(ctx, "Nope Ltd", "GHS", 10)

        assert excinfo.value.message == "Only Admin users can create companies."
        assert Company.objects.count() == before

    def test_user_without_roles_is_rejected(self, user):
        with pytest.raises(Unauthorized):
            create_company(build_request_context(user, None), "Nope Ltd", "GHS", 10)
        assert not Company.objects.filter(name="Nope Ltd").exists()

    @pytest.mark.parametrize(
        "name, currency, month, error",
        [
            ("   ", "GHS", 10, "Company name is required."),
            ("Co", "GH", 10, "Base currency must be a 3-letter code."),
            ("Co", "GHS", 0, "Fiscal year start month must be between 1 and 12."),
            ("Co", "GHS", 13, "Fiscal year start month must be between 1 and 12."),
        ],
    )
    def test_invalid_input(self, admin_user, name, currency, month, error):
        ctx = build_request_context(admin_user, None)
        before = Company.objects.count()

        result = create_company(ctx, name, currency, month)

        assert not result.success
        assert result.error == error
        assert Company.objects.count() == before

    def test_failed_role_grant_rolls_back_company(self, admin_user):
        ctx = build_request_context(admin_user, None)
        before = Company.objects.count()

        with mock.patch.object(
            UserCompanyRole.objects,
            "create",
            side_effect=IntegrityError("insert into accounts_usercompanyrole failed"),
        ):
            with pytest.raises(ExternalStoreError) as excinfo:
                create_company(ctx, "Half Made Ltd", "GHS", 10)

        assert "accounts_usercompanyrole" in excinfo.value.message
        assert Company.objects.count() == before
        assert not Company.objects.filter(name="Half Made Ltd").exists()


@pytest.mark.django_db
class TestSwitchActiveCompany:
    def test_member_can_switch(self, officer_user, company):
        ctx = build_request_context(officer_user, None)

        result = switch_active_company(ctx, str(company.public_id))

        assert result.success
        assert result.data["company"].id == str(company.public_id)
        assert result.data["role"] == "AccountsOfficer"

    def test_non_member_cannot_switch(self, officer_user, second_company):
        ctx = build_request_context(officer_user, None)

        result = switch_active_company(ctx, str(second_company.public_id))

        assert not result.success
        assert result.error == "You do not have access to that company."

    def test_malformed_id(self, officer_user):
        result = switch_active_company(build_request_context(officer_user, None), "junk")
        assert not result.success


@pytest.mark.django_db
class TestGrantCompanyRole:
    def test_creates_then_replaces(self, user, company):
        first = grant_company_role(company, user, Role.MANAGER)
        second = grant_company_role(company, user, Role.DIRECTOR)

        assert first.data["created"] is True
        assert second.data["created"] is False
        assert list(
            UserCompanyRole.objects.filter(user=user, company=company).values_list("role", flat=True)
        ) == ["Director"]

    def test_grant_logs_and_persists_with_info_logging(self, user, company, caplog):
        # accounts loggers do not propagate, so listen on the module logger itself
        command_logger = logging.getLogger("accounts.commands")
        command_logger.addHandler(caplog.handler)
        try:
            with caplog.at_level(logging.INFO, logger="accounts.commands"):
                result = grant_company_role(company, user, Role.MANAGER)
        finally:
            command_logger.removeHandler(caplog.handler)

        assert result.success
        assert UserCompanyRole.objects.filter(user=user, company=company, role="Manager").exists()
        [record] = [r for r in caplog.records if r.getMessage() == "Company role granted"]
        assert record.role_created is True

    def test_unknown_role(self, user, company):
        result = grant_company_role(company, user, "Owner")
        assert not result.success
        assert not UserCompanyRole.objects.filter(user=user).exists()
