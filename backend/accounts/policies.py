# accounts/policies.py
"""
Document permission policy.

Answers "may this role take this action on a document in this status?"
as a (allowed, reason) pair. Policies are pure functions; callers decide
whether to raise.

Usage:
    result = can_perform(UserCompanyRole.Role.MANAGER, DocStatus.SUBMITTED, Action.POST)
    if not result.allowed:
        return error(result.reason)
"""
from typing import Iterable, NamedTuple, Optional

from django.db import models

from accounts.models import UserCompanyRole


Role = UserCompanyRole.Role


class DocStatus(models.TextChoices):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    POSTED = "posted"
    VOIDED = "voided"


class Action(models.TextChoices):
    VIEW = "VIEW"
    CREATE = "CREATE"
    EDIT = "EDIT"
    DELETE_DRAFT = "DELETE_DRAFT"
    SUBMIT = "SUBMIT"
    POST = "POST"
    VOID = "VOID"
    REVERSE = "REVERSE"


class PermissionResult(NamedTuple):
    allowed: bool
    reason: Optional[str] = None


ALLOW = PermissionResult(True)

ONLY_DRAFT_EDIT = "Only draft documents can be edited."
ONLY_DRAFT_DELETE = "Only draft documents can be deleted."
ONLY_DRAFT_SUBMIT = "Only draft documents can be submitted."
ONLY_SUBMITTED_POST = "Only submitted documents can be posted."
ONLY_POSTED_VOID = "Only posted documents can be voided or reversed."


def _deny(reason: str) -> PermissionResult:
    return PermissionResult(False, reason)


def _when(condition: bool, reason: str) -> PermissionResult:
    return ALLOW if condition else _deny(reason)


def can_perform(role: str, status: Optional[str], action: str) -> PermissionResult:
    """Check a single role against the document lifecycle."""
    if action == Action.VIEW:
        return ALLOW

    is_draft = status == DocStatus.DRAFT
    is_submitted = status == DocStatus.SUBMITTED
    is_posted = status == DocStatus.POSTED

    if role == Role.ADMIN:
        if action in (Action.VOID, Action.REVERSE):
            return _when(is_posted, ONLY_POSTED_VOID)
        if action == Action.DELETE_DRAFT:
            return _when(is_draft, ONLY_DRAFT_DELETE)
        if action == Action.EDIT:
            return _when(is_draft, ONLY_DRAFT_EDIT)
        if action == Action.SUBMIT:
            return _when(is_draft, ONLY_DRAFT_SUBMIT)
        if action == Action.POST:
            return _when(is_submitted, ONLY_SUBMITTED_POST)
        return ALLOW

    if role == Role.ACCOUNTS_OFFICER:
        if action in (Action.CREATE, Action.EDIT):
            return ALLOW
        if action == Action.DELETE_DRAFT:
            return _when(is_draft, ONLY_DRAFT_DELETE)
        if action == Action.SUBMIT:
            return _when(is_draft, ONLY_DRAFT_SUBMIT)
        return _deny("You can submit but not post or void.")

    if role == Role.MANAGER:
        if action == Action.POST:
            return _when(is_submitted, ONLY_SUBMITTED_POST)
        if action in (Action.VOID, Action.REVERSE):
            return _when(is_posted, ONLY_POSTED_VOID)
        return _deny("You have view and posting rights only.")

    if role in (Role.DIRECTOR, Role.AUDITOR):
        return _deny("View-only role.")

    return _deny("Role not permitted.")


def can_any_role(roles: Iterable[str], status: Optional[str], action: str) -> PermissionResult:
    """
    Allowed if any of the roles allows the action. On denial the reason
    comes from the first role (Auditor when there are none).
    """
    roles = list(roles)
    for role in roles:
        result = can_perform(role, status, action)
        if result.allowed:
            return result

    fallback = can_perform(roles[0] if roles else Role.AUDITOR, status, action)
    return _deny(fallback.reason or "Not permitted.")
