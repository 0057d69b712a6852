# accounts/authz.py
"""
Authorization gate.

Provides:
- RequestContext: Immutable context for the current request
- resolve_request_context: Build it from the request
- landing_url: Role-based landing page routing
- require_admin_anywhere / require_company_access / require_company_role:
  Check roles and raise Unauthorized if not granted

Per request the gate moves through:

    Unauthenticated -> Authenticated(user) -> RolesLoaded(roles)
        -> ActiveCompanyResolved(company_id | None)
        -> Authorized | Denied | Redirected

The active company comes straight from the cookie. A cookie can outlive
the role that justified it, so every check below compares the selection
against the user's roles at the point of use.
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple
from urllib.parse import urlencode

from django.conf import settings
from django.urls import reverse

from accounts.exceptions import Unauthorized
from accounts.models import UserCompanyRole
from accounts.policies import PermissionResult, can_any_role
from accounts.queries import CompanyRole, get_user_company_roles
from accounts.session import resolve_session_user
from tenant.cookies import get_active_company_id


CREATE_COMPANY_DENIED = "Only Admin users can create companies."
NO_COMPANY_ACCESS = "User does not have access to this company."
ROLE_NOT_ALLOWED = "User does not have permission for this action."

_REQUEST_CONTEXT_ATTR = "_request_context"


@dataclass(frozen=True)
class RequestContext:
    """
    Immutable context for the current actor (user + roles + active company).

    Passed explicitly to commands and views instead of re-reading the
    request.

    Attributes:
        user: The authenticated user
        roles: Every (company_id, role) grant the user holds
        active_company_id: The persisted selection, unvalidated (may be None)
    """
    user: object
    roles: Tuple[CompanyRole, ...]
    active_company_id: Optional[str]

    @property
    def user_id(self) -> str:
        return str(self.user.public_id)

    @property
    def has_company_access(self) -> bool:
        return bool(self.roles)

    def roles_for(self, company_id: Optional[str]) -> Tuple[str, ...]:
        """Role names the user holds on one company."""
        if company_id is None:
            return ()
        return tuple(r.role for r in self.roles if r.company_id == str(company_id))

    def has_access_to(self, company_id: Optional[str]) -> bool:
        return bool(self.roles_for(company_id))

    @property
    def resolved_company_id(self) -> Optional[str]:
        """The active company, only if the user actually holds a role on it."""
        if self.has_access_to(self.active_company_id):
            return self.active_company_id
        return None

    @property
    def is_admin_for_active_company(self) -> bool:
        return any(
            r.company_id == self.active_company_id and r.role == UserCompanyRole.Role.ADMIN
            for r in self.roles
        )

    @property
    def is_admin_anywhere(self) -> bool:
        return any(r.role == UserCompanyRole.Role.ADMIN for r in self.roles)

    def can(self, company_id: Optional[str], status: Optional[str], action: str) -> PermissionResult:
        """Apply the document permission policy to the user's roles on a company."""
        roles = self.roles_for(company_id)
        if not roles:
            return PermissionResult(False, NO_COMPANY_ACCESS)
        return can_any_role(roles, status, action)


def build_request_context(user, active_company_id: Optional[str]) -> RequestContext:
    roles = tuple(get_user_company_roles(user))
    return RequestContext(user=user, roles=roles, active_company_id=active_company_id)


def resolve_request_context(request) -> RequestContext:
    """
    Build the RequestContext for the current request.

    Roles are loaded fresh from the database once per request, then cached
    on the request for the template context processor and nested calls.

    Raises:
        Unauthenticated: If there is no valid session
        ExternalStoreError: If the role lookup fails
    """
    cached = getattr(request, _REQUEST_CONTEXT_ATTR, None)
    if cached is not None:
        return cached

    user = resolve_session_user(request)
    ctx = build_request_context(user, get_active_company_id(request))
    setattr(request, _REQUEST_CONTEXT_ATTR, ctx)
    return ctx


# =============================================================================
# Policies
# =============================================================================

def landing_url(ctx: RequestContext) -> str:
    """
    Admin company list if the user is Admin of the active company,
    otherwise the staff journals page.
    """
    if ctx.is_admin_for_active_company:
        return settings.ADMIN_LANDING_URL
    return settings.STAFF_LANDING_URL


def require_admin_anywhere(ctx: RequestContext) -> None:
    """
    Company creation policy: Admin of ANY company (not necessarily the
    active one).

    Raises:
        Unauthorized: If the user holds no Admin role
    """
    if not ctx.is_admin_anywhere:
        raise Unauthorized(CREATE_COMPANY_DENIED)


def require_company_access(ctx: RequestContext, company_id: Optional[str]) -> Tuple[str, ...]:
    """
    Require any role on the company; returns the roles held there.

    Raises:
        Unauthorized: If the user holds no role on the company
    """
    roles = ctx.roles_for(company_id)
    if not roles:
        raise Unauthorized(NO_COMPANY_ACCESS)
    return roles


def require_company_role(ctx: RequestContext, company_id: Optional[str], allowed: Iterable[str]) -> None:
    """
    Require one of the allowed roles on the company.

    Example:
        require_company_role(ctx, company_id, [Role.ADMIN, Role.MANAGER])
    """
    roles = require_company_access(ctx, company_id)
    allowed = set(allowed)
    if not any(role in allowed for role in roles):
        raise Unauthorized(ROLE_NOT_ALLOWED)


def default_company_redirect(ctx: RequestContext, next_path: str) -> Optional[str]:
    """
    URL that selects the user's first company and returns to next_path.

    Returns None when no redirect is needed: the active company is one of
    the user's, or the user has no company access at all.
    """
    if not ctx.roles or ctx.resolved_company_id is not None:
        return None

    query = urlencode({"company_id": ctx.roles[0].company_id, "next": next_path})
    return f"{reverse('accounts:company-default')}?{query}"
