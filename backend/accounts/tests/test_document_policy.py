#accounts/tests/test_document_policy.py

from django.test import SimpleTestCase

from accounts.models import UserCompanyRole
from accounts.policies import Action, DocStatus, can_any_role, can_perform


Role = UserCompanyRole.Role


class TestDocumentPolicy(SimpleTestCase):
    def test_everyone_can_view(self):
        for role in Role.values:
            for status in DocStatus.values:
                self.assertTrue(can_perform(role, status, Action.VIEW).allowed)

    def test_admin_lifecycle_is_status_gated(self):
        self.assertTrue(can_perform(Role.ADMIN, DocStatus.DRAFT, Action.EDIT).allowed)
        self.assertTrue(can_perform(Role.ADMIN, DocStatus.SUBMITTED, Action.POST).allowed)
        self.assertTrue(can_perform(Role.ADMIN, DocStatus.POSTED, Action.VOID).allowed)

        result = can_perform(Role.ADMIN, DocStatus.DRAFT, Action.POST)
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "Only submitted documents can be posted.")

        result = can_perform(Role.ADMIN, DocStatus.POSTED, Action.EDIT)
        self.assertEqual(result.reason, "Only draft documents can be edited.")

    def test_accounts_officer_submits_but_never_posts(self):
        self.assertTrue(can_perform(Role.ACCOUNTS_OFFICER, None, Action.CREATE).allowed)
        self.assertTrue(can_perform(Role.ACCOUNTS_OFFICER, DocStatus.DRAFT, Action.SUBMIT).allowed)

        result = can_perform(Role.ACCOUNTS_OFFICER, DocStatus.SUBMITTED, Action.POST)
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "You can submit but not post or void.")

    def test_manager_posts_and_voids(self):
        self.assertTrue(can_perform(Role.MANAGER, DocStatus.SUBMITTED, Action.POST).allowed)
        self.assertTrue(can_perform(Role.MANAGER, DocStatus.POSTED, Action.REVERSE).allowed)
        self.assertEqual(
            can_perform(Role.MANAGER, DocStatus.DRAFT, Action.CREATE).reason,
            "You have view and posting rights only.",
        )

    def test_view_only_roles(self):
        for role in (Role.DIRECTOR, Role.AUDITOR):
            result = can_perform(role, DocStatus.DRAFT, Action.CREATE)
            self.assertEqual(result, (False, "View-only role."))

    def test_unknown_role(self):
        self.assertEqual(can_perform("Owner", DocStatus.DRAFT, Action.CREATE).reason, "Role not permitted.")

    def test_any_role_allows_if_one_does(self):
        result = can_any_role([Role.AUDITOR, Role.MANAGER], DocStatus.SUBMITTED, Action.POST)
        self.assertTrue(result.allowed)

    def test_any_role_reason_comes_from_first_role(self):
        result = can_any_role([Role.MANAGER, Role.AUDITOR], DocStatus.DRAFT, Action.POST)
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "Only submitted documents can be posted.")

    def test_no_roles(self):
        result = can_any_role([], DocStatus.DRAFT, Action.CREATE)
        self.assertEqual(result, (False, "View-only role."))
