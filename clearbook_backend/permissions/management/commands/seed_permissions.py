# permissions/management/commands/seed_permissions.py

from django.core.management.base import BaseCommand, CommandError

from companies.models import Company
from permissions.services.permission_service import seed_default_role_permissions


class Command(BaseCommand):
    help = "Seed default role -> module permissions for one company (or all companies)."

    def add_arguments(self, parser):
        parser.add_argument("--company-id", default="", help="Company key, e.g. HARI_INDUSTRIES")

    def handle(self, *args, **options):
        company_id = (options.get("company_id") or "").strip().upper()

        if company_id:
            companies = list(Company.objects.filter(pk=company_id))
            if not companies:
                raise CommandError(f"Company not found: {company_id}")
        else:
            companies = list(Company.objects.filter(is_active=True))

        for company in companies:
            created = seed_default_role_permissions(company)
            self.stdout.write(
                self.style.SUCCESS(f"{company.company_id}: {created} role permission(s) created")
            )
