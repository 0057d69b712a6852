"""
Create a company and make a user its Admin.

Bootstraps the first Admin of a fresh installation; after that, Admins
create further companies from the admin pages. A user that does not exist
yet is created, with --password or an unusable password.

Usage:
    python manage.py provision_company "Acme Ltd" admin@acme.test
    python manage.py provision_company "Acme Ltd" admin@acme.test --currency USD --fy-start-month 1
    python manage.py provision_company "Acme Ltd" new@acme.test --password s3cret-pass
"""
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.commands import grant_company_role
from accounts.models import Company, UserCompanyRole
from accounts.rls import rls_bypass


class Command(BaseCommand):
    help = "Create a company and grant a user the Admin role on it"

    def add_arguments(self, parser):
        parser.add_argument("name", help="Company display name")
        parser.add_argument("admin_email", help="Email of the user who becomes Admin")
        parser.add_argument(
            "--currency",
            default=settings.DEFAULT_BASE_CURRENCY,
            help="Base currency code (default: %(default)s)",
        )
        parser.add_argument(
            "--fy-start-month",
            type=int,
            default=settings.DEFAULT_FY_START_MONTH,
            help="First month of the fiscal year, 1-12 (default: %(default)s)",
        )
        parser.add_argument(
            "--password",
            help="Password for the Admin user when it has to be created",
        )

    def handle(self, *args, **options):
        User = get_user_model()
        email = options["admin_email"].lower().strip()
        currency = options["currency"].strip().upper()
        fy_start_month = options["fy_start_month"]

        if len(currency) != 3 or not currency.isalpha():
            raise CommandError("Currency must be a 3-letter code.")
        if not 1 <= fy_start_month <= 12:
            raise CommandError("Fiscal year start month must be between 1 and 12.")

        with rls_bypass():
            with transaction.atomic():
                user = User.objects.filter(email=email).first()
                if user is None:
                    user = User.objects.create_user(email=email, password=options["password"])
                    self.stdout.write(f"  CREATED user {email}")

                company = Company.objects.create(
                    name=options["name"].strip(),
                    base_currency=currency,
                    fy_start_month=fy_start_month,
                )
                result = grant_company_role(company, user, UserCompanyRole.Role.ADMIN)
                if not result.success:
                    raise CommandError(result.error)

        self.stdout.write(
            self.style.SUCCESS(
                f"Created {company.name} (ID: {company.public_id}) with Admin {user.email}"
            )
        )
