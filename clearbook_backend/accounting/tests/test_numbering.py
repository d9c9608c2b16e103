# accounting/tests/test_numbering.py

from __future__ import annotations

from datetime import date

from django.db import transaction
from django.test import TestCase

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.numbering import next_sequence_number, next_voucher_number
from companies.tests.factories import account, make_company, post_simple


class SequenceNumberTests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.cash = account(self.company, Account.CASH)
        self.revenue = account(self.company, Account.SALES_REVENUE)

    def _post(self):
        return post_simple(self.company, date(2024, 2, 1), self.cash, self.revenue, "10")

    def test_max_is_numeric_not_lexicographic(self):
        first = self._post()
        self._post()
        JournalVoucher.objects.filter(pk=first.pk).update(voucher_number="ACME-2024-1000000")

        with transaction.atomic():
            self.assertEqual(next_voucher_number(self.company, date(2024, 5, 1)), "ACME-2024-1000001")

    def test_values_with_other_suffixes_are_ignored(self):
        voucher = self._post()
        JournalVoucher.objects.filter(pk=voucher.pk).update(voucher_number="ACME-2024-000050-OLD")

        with transaction.atomic():
            self.assertEqual(next_voucher_number(self.company, date(2024, 5, 1)), "ACME-2024-000001")

    def test_first_number_for_empty_queryset(self):
        with transaction.atomic():
            number = next_sequence_number(
                company=self.company,
                queryset=JournalVoucher.objects.none(),
                field="voucher_number",
                prefix="X-",
                width=3,
            )
        self.assertEqual(number, "X-001")
