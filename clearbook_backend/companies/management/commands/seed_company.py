# companies/management/commands/seed_company.py

from django.core.management.base import BaseCommand, CommandError

from companies.models import Company
from companies.services.company_service import bootstrap_company


class Command(BaseCommand):
    help = "Create a company with its default chart of accounts, role permissions and admin user (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--company-id", required=True, help="Company key, e.g. HARI_INDUSTRIES")
        parser.add_argument("--name", required=True)
        parser.add_argument(
            "--company-type",
            default=Company.TYPE_MANUFACTURING,
            choices=[Company.TYPE_MANUFACTURING, Company.TYPE_SERVICES],
        )
        parser.add_argument("--currency", default="")
        parser.add_argument("--admin-email", default="")
        parser.add_argument("--admin-password", default="")

    def handle(self, *args, **options):
        if options["admin_email"] and not options["admin_password"]:
            raise CommandError("--admin-password is required with --admin-email")

        result = bootstrap_company(
            company_id=options["company_id"],
            name=options["name"],
            company_type=options["company_type"],
            currency=options["currency"] or None,
            admin_email=options["admin_email"] or None,
            admin_password=options["admin_password"] or None,
        )

        company = result["company"]
        verb = "Created" if result["created"] else "Found"
        self.stdout.write(self.style.SUCCESS(f"{verb} company {company.company_id}"))
        self.stdout.write(f"Accounts created: {result['accounts_created']}")
        self.stdout.write(f"Role permissions created: {result['permissions_created']}")
        if result["admin"] is not None:
            state = "created" if result["admin_created"] else "already exists"
            self.stdout.write(f"Admin {result['admin'].email} {state}")
