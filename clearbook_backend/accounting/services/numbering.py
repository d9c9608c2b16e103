# accounting/services/numbering.py

"""
DOCUMENT NUMBERING

All sequences are MAX(existing) + 1 computed in the database while the
company row is locked (select_for_update), so two concurrent postings cannot
mint the same number. Only values shaped exactly <prefix><digits> count.

Formats:
- Journal voucher:  {company_id}-{YYYY}-{seq:06d}
- Payment voucher:  PV-{YYYY}-{seq:04d}
- Other documents use next_sequence_number() with their own prefix/width.

Callers must already be inside transaction.atomic.
"""

from __future__ import annotations

import re

from django.db.models import BigIntegerField, Max
from django.db.models.functions import Cast, Substr

from companies.models import Company


def lock_company(company) -> Company:
    return Company.objects.select_for_update().get(pk=company.pk)


def next_sequence_number(*, company, queryset, field: str, prefix: str, width: int) -> str:
    """
    `queryset` must already be scoped to the company.
    Returns e.g. prefix="INV-", width=5 -> "INV-00042".
    """
    lock_company(company)
    latest = (
        queryset.filter(**{f"{field}__regex": rf"^{re.escape(prefix)}[0-9]+$"})
        .annotate(seq_value=Cast(Substr(field, len(prefix) + 1), BigIntegerField()))
        .aggregate(top=Max("seq_value"))["top"]
    )
    seq = (latest or 0) + 1
    return f"{prefix}{seq:0{width}d}"


def next_voucher_number(company, entry_date) -> str:
    from accounting.models.journal import JournalVoucher

    prefix = f"{company.pk}-{entry_date.year}-"
    return next_sequence_number(
        company=company,
        queryset=JournalVoucher.objects.filter(company=company),
        field="voucher_number",
        prefix=prefix,
        width=6,
    )


def next_payment_voucher_number(company, voucher_date) -> str:
    from accounting.models.payment_voucher import PaymentVoucher

    return next_sequence_number(
        company=company,
        queryset=PaymentVoucher.objects.filter(company=company),
        field="pv_number",
        prefix=f"PV-{voucher_date.year}-",
        width=4,
    )
