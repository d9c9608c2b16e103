# accounting/management/commands/seed_chart.py

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounting.services.chart_setup import seed_default_chart
from companies.models import Company


class Command(BaseCommand):
    help = "Seed the default chart of accounts (idempotent) for one company or all active companies"

    def add_arguments(self, parser):
        parser.add_argument("--company-id", default="", help="Company key, e.g. HARI_INDUSTRIES")

    @transaction.atomic
    def handle(self, *args, **options):
        company_id = (options.get("company_id") or "").strip().upper()

        if company_id:
            companies = list(Company.objects.filter(pk=company_id))
            if not companies:
                raise CommandError(f"Company not found: {company_id}")
        else:
            companies = list(Company.objects.filter(is_active=True))

        for company in companies:
            self.stdout.write(f"Seeding chart of accounts for {company.company_id}...")
            created = seed_default_chart(company)
            self.stdout.write(self.style.SUCCESS(f"{company.company_id}: {created} account(s) created"))
