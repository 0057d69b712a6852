"""
Grant (or change) a user's role on a company.

Usage:
    python manage.py grant_company_role <company_id> clerk@acme.test AccountsOfficer
"""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from accounts.commands import grant_company_role
from accounts.models import UserCompanyRole
from accounts.queries import get_company
from accounts.rls import rls_bypass


class Command(BaseCommand):
    help = "Grant a user a role on a company, replacing any role held there"

    def add_arguments(self, parser):
        parser.add_argument("company_id", help="Company public id")
        parser.add_argument("email", help="User email")
        parser.add_argument("role", choices=UserCompanyRole.Role.values)

    def handle(self, *args, **options):
        User = get_user_model()
        email = options["email"].lower().strip()

        with rls_bypass():
            company = get_company(options["company_id"])
            if company is None:
                raise CommandError(f"No company with id {options['company_id']}.")

            try:
                user = User.objects.get(email=email)
            except User.DoesNotExist:
                raise CommandError(f"No user with email {email}.")

            result = grant_company_role(company, user, options["role"])

        if not result.success:
            raise CommandError(result.error)

        verb = "Granted" if result.data["created"] else "Updated"
        self.stdout.write(
            self.style.SUCCESS(f"{verb} {options['role']} on {company.name} for {user.email}")
        )
