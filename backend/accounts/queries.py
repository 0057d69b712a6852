# accounts/queries.py
"""
Read-only lookups of a user's company access.

An empty result is a valid state ("no company access yet"), never an
error. Database failures surface as ExternalStoreError.
"""
from __future__ import annotations

from typing import List, NamedTuple, Optional

from django.core.exceptions import ValidationError

from accounts.exceptions import translate_store_errors
from accounts.models import Company, UserCompanyRole


class CompanyRole(NamedTuple):
    """One (company, role) grant; company_id is the company's public id."""

    company_id: str
    role: str


class CompanySummary(NamedTuple):
    id: str
    name: str
    base_currency: str

    @classmethod
    def from_company(cls, company: Company) -> "CompanySummary":
        return cls(
            id=str(company.public_id),
            name=company.name,
            base_currency=company.base_currency,
        )


def get_user_company_roles(user) -> List[CompanyRole]:
    """Return every (company_id, role) pair granted to the user."""
    with translate_store_errors("load company roles"):
        rows = list(
            UserCompanyRole.objects
            .filter(user=user)
            .order_by("id")
            .values_list("company__public_id", "role")
        )
    return [CompanyRole(company_id=str(company_id), role=role) for company_id, role in rows]


def get_user_companies(user) -> List[CompanySummary]:
    """
    Return the companies the user holds any role on, deduplicated, in the
    order the roles were granted.
    """
    with translate_store_errors("load user companies"):
        grants = list(
            UserCompanyRole.objects
            .filter(user=user)
            .select_related("company")
            .order_by("id")
        )

    companies = {}
    for grant in grants:
        summary = CompanySummary.from_company(grant.company)
        companies.setdefault(summary.id, summary)
    return list(companies.values())


def get_company(company_id: str) -> Optional[Company]:
    """Look up a company by public id; malformed ids are treated as missing."""
    with translate_store_errors("load company"):
        try:
            return Company.objects.get(public_id=company_id)
        except (Company.DoesNotExist, ValidationError):
            return None
