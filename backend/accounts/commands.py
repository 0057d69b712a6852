# accounts/commands.py
"""
Command layer for company and role mutations.

ALL writes to companies and role grants go through these commands:
- Company creation (gated on an Admin role)
- Active company switching (membership-checked)
- Role provisioning

Authorization failures raise Unauthorized; input problems come back as
CommandResult.fail(message); database failures raise ExternalStoreError.
"""
import logging

from django.db import transaction

from accounts.authz import RequestContext, require_admin_anywhere, require_company_access
from accounts.exceptions import Unauthorized, translate_store_errors
from accounts.models import Company, UserCompanyRole
from accounts.queries import CompanySummary, get_company
from accounts.rls import rls_bypass


logger = logging.getLogger(__name__)


class CommandResult:
    def __init__(self, success: bool, data=None, error: str = None):
        self.success = success
        self.data = data
        self.error = error

    @classmethod
    def ok(cls, data=None):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str):
        return cls(success=False, error=error)


# =============================================================================
# Company Creation
# =============================================================================

def create_company(
    ctx: RequestContext,
    name: str,
    base_currency: str,
    fy_start_month: int,
) -> CommandResult:
    """
    Create a company and make the caller its Admin.

    Permitted when the caller is Admin of any company. The company row and
    the creator's Admin role are written in one transaction: if the role
    grant fails, the company insert is rolled back too.

    Args:
        ctx: The caller's RequestContext
        name: Display name of the company
        base_currency: ISO currency code, stored upper-cased
        fy_start_month: First month of the fiscal year (1-12)

    Returns:
        CommandResult with {"company": CompanySummary}

    Raises:
        Unauthorized: If the caller holds no Admin role (no writes happen)
        ExternalStoreError: If either insert fails
    """
    try:
        require_admin_anywhere(ctx)
    except Unauthorized:
        logger.warning(
            "Company creation denied",
            extra={"user_id": ctx.user_id, "company_name": name},
        )
        raise

    name = (name or "").strip()
    if not name:
        return CommandResult.fail("Company name is required.")

    base_currency = (base_currency or "").strip().upper()
    if len(base_currency) != 3 or not base_currency.isalpha():
        return CommandResult.fail("Base currency must be a 3-letter code.")

    if not isinstance(fy_start_month, int) or not 1 <= fy_start_month <= 12:
        return CommandResult.fail("Fiscal year start month must be between 1 and 12.")

    with translate_store_errors("create company"):
        with transaction.atomic(), rls_bypass():
            company = Company.objects.create(
                name=name,
                base_currency=base_currency,
                fy_start_month=fy_start_month,
            )
            UserCompanyRole.objects.create(
                user=ctx.user,
                company=company,
                role=UserCompanyRole.Role.ADMIN,
            )

    logger.info(
        "Company created",
        extra={"company_id": str(company.public_id), "user_id": ctx.user_id},
    )
    return CommandResult.ok({"company": CompanySummary.from_company(company)})


# =============================================================================
# Company Switching
# =============================================================================

def switch_active_company(ctx: RequestContext, company_id: str) -> CommandResult:
    """
    Validate a new active company selection.

    The caller must hold a role on the target company. Persisting the
    selection (the cookie) is the view's job.

    Returns:
        CommandResult with {"company": CompanySummary, "role": str}
    """
    try:
        roles = require_company_access(ctx, company_id)
    except Unauthorized:
        return CommandResult.fail("You do not have access to that company.")

    company = get_company(company_id)
    if company is None:
        return CommandResult.fail("Company not found.")

    logger.info(
        "Active company switched",
        extra={
            "user_id": ctx.user_id,
            "from_company_id": ctx.active_company_id,
            "to_company_id": company_id,
        },
    )
    return CommandResult.ok({
        "company": CompanySummary.from_company(company),
        "role": roles[0],
    })


# =============================================================================
# Provisioning
# =============================================================================

@transaction.atomic
def grant_company_role(company: Company, user, role: str) -> CommandResult:
    """
    Give a user a role on a company, replacing any role they already hold
    there (one role per user and company).

    Used by provisioning; not exposed to end users.
    """
    if role not in UserCompanyRole.Role.values:
        return CommandResult.fail(f"Unknown role '{role}'.")

    with translate_store_errors("grant company role"), rls_bypass():
        grant, created = UserCompanyRole.objects.update_or_create(
            user=user,
            company=company,
            defaults={"role": role},
        )

    logger.info(
        "Company role granted",
        extra={
            "company_id": str(company.public_id),
            "user_id": str(user.public_id),
            "role": role,
            "role_created": created,
        },
    )
    return CommandResult.ok({"grant": grant, "created": created})
