# accounting/services/payment_voucher_service.py

"""
PAYMENT VOUCHER SERVICE

create_payment_voucher:
- refused while the company's payment form is locked
- computes line VAT/WHT, gross, net payable
- raises a journal voucher in awaiting_approval:
    Dr each line GL account         (amount)
    Dr VAT_INPUT                    (line VAT, per line)
    Cr WHT_PAYABLE                  (total WHT)
    Cr bank/cash account            (net payable)

approve -> posts the journal voucher
reject  -> rejects the journal voucher
Both only from Submitted.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.models.payment_voucher import PaymentVoucher, PaymentVoucherLine
from accounting.services.account_resolver import get_account_by_role
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_voucher_service import (
    create_journal_voucher,
    post_voucher,
    reject_voucher,
)
from accounting.services.money import ZERO, money, percent_of, q2
from accounting.services.numbering import next_payment_voucher_number

logger = logging.getLogger(__name__)


class PaymentVoucherError(ValueError):
    pass


class PaymentFormLockedError(PaymentVoucherError):
    pass


class PaymentVoucherStateError(PaymentVoucherError):
    pass


def compute_line_amounts(line: dict) -> dict:
    amount = money(line.get("amount"))
    if amount <= ZERO:
        raise PaymentVoucherError("Each line amount must be > 0")

    vat_applicable = bool(line.get("vat_applicable"))
    wht_applicable = bool(line.get("wht_applicable"))
    vat_rate = q2(line.get("vat_rate") or 0) if vat_applicable else ZERO
    wht_rate = q2(line.get("wht_rate") or 0) if wht_applicable else ZERO

    return {
        **line,
        "amount": amount,
        "vat_applicable": vat_applicable,
        "vat_rate": vat_rate,
        "vat_amount": percent_of(amount, vat_rate),
        "wht_applicable": wht_applicable,
        "wht_rate": wht_rate,
        "wht_amount": percent_of(amount, wht_rate),
    }


@transaction.atomic
def create_payment_voucher(
    *,
    company,
    voucher_date,
    payee_name: str,
    bank_cash_account: Account,
    lines: list[dict],
    user=None,
    payment_type: str = "",
    payment_mode: str = "",
    currency: str | None = None,
    exchange_rate=None,
    payee_type: str = "",
    payee_code: str = "",
    narration: str = "",
    source_module: str = "",
    source_document_no: str = "",
) -> PaymentVoucher:
    if company.payment_form_locked:
        logger.warning("Payment voucher refused: form locked company=%s", company.pk)
        raise PaymentFormLockedError("Payment voucher creation is locked for this company")

    if not lines:
        raise PaymentVoucherError("A payment voucher needs at least one line")

    if bank_cash_account.company_id != company.pk or bank_cash_account.account_type != Account.ASSET:
        raise PaymentVoucherError("bank_cash_account must be an ASSET account of this company")

    computed = [compute_line_amounts(line) for line in lines]
    for line in computed:
        account = line.get("gl_account")
        if account is None or account.company_id != company.pk:
            raise PaymentVoucherError("Each line needs a GL account of this company")

    gross = q2(sum((l["amount"] for l in computed), ZERO))
    total_vat = q2(sum((l["vat_amount"] for l in computed), ZERO))
    total_wht = q2(sum((l["wht_amount"] for l in computed), ZERO))
    net_payable = q2(gross + total_vat - total_wht)

    if net_payable <= ZERO:
        raise PaymentVoucherError("Net payable must be > 0")

    pv = PaymentVoucher.objects.create(
        company=company,
        pv_number=next_payment_voucher_number(company, voucher_date),
        voucher_date=voucher_date,
        payment_type=payment_type or "",
        payment_mode=payment_mode or "",
        currency=(currency or company.currency or "NGN").upper(),
        exchange_rate=exchange_rate or 1,
        payee_type=payee_type or "",
        payee_code=payee_code or "",
        payee_name=payee_name,
        narration=narration or "",
        source_module=source_module or "",
        source_document_no=source_document_no or "",
        gross_amount=gross,
        total_vat=total_vat,
        total_wht=total_wht,
        net_payable=net_payable,
        bank_cash_account=bank_cash_account,
        status=PaymentVoucher.STATUS_SUBMITTED,
        prepared_by=user if getattr(user, "is_authenticated", False) else None,
    )

    PaymentVoucherLine.objects.bulk_create(
        [
            PaymentVoucherLine(
                payment_voucher=pv,
                gl_account=l["gl_account"],
                line_description=(l.get("line_description") or "")[:255],
                cost_center=(l.get("cost_center") or "")[:50],
                amount=l["amount"],
                vat_applicable=l["vat_applicable"],
                vat_rate=l["vat_rate"],
                vat_amount=l["vat_amount"],
                wht_applicable=l["wht_applicable"],
                wht_rate=l["wht_rate"],
                wht_amount=l["wht_amount"],
            )
            for l in computed
        ]
    )

    try:
        jv_lines = []
        vat_input = get_account_by_role(company, Account.VAT_INPUT) if total_vat > ZERO else None
        for l in computed:
            jv_lines.append(
                {
                    "account": l["gl_account"],
                    "debit": l["amount"],
                    "payee": payee_name,
                    "description": l.get("line_description") or narration,
                }
            )
            if l["vat_amount"] > ZERO:
                jv_lines.append(
                    {
                        "account": vat_input,
                        "debit": l["vat_amount"],
                        "payee": payee_name,
                        "description": f"VAT on {l.get('line_description') or pv.pv_number}",
                    }
                )
        if total_wht > ZERO:
            jv_lines.append(
                {
                    "account": get_account_by_role(company, Account.WHT_PAYABLE),
                    "credit": total_wht,
                    "payee": payee_name,
                    "description": f"WHT deducted {pv.pv_number}",
                }
            )
        jv_lines.append(
            {
                "account": bank_cash_account,
                "credit": net_payable,
                "payee": payee_name,
                "description": f"Payment {pv.pv_number}",
            }
        )

        voucher = create_journal_voucher(
            company=company,
            entry_date=voucher_date,
            narration=narration or f"Payment voucher {pv.pv_number} - {payee_name}",
            lines=jv_lines,
            source=JournalVoucher.SOURCE_PAYMENT_VOUCHER,
            status=JournalVoucher.STATUS_AWAITING_APPROVAL,
            reference_type="PAYMENT_VOUCHER",
            reference_id=pv.pk,
            created_by=user,
        )
    except AccountingServiceError as exc:
        raise PaymentVoucherError(str(exc)) from exc

    pv.journal_voucher = voucher
    pv.save()

    logger.info("Payment voucher created company=%s number=%s net=%s", company.pk, pv.pv_number, net_payable)
    return pv


def _lock_pv(pv: PaymentVoucher) -> PaymentVoucher:
    return (
        PaymentVoucher.objects.select_for_update()
        .select_related("company", "journal_voucher")
        .get(pk=pv.pk)
    )


@transaction.atomic
def approve_payment_voucher(*, payment_voucher: PaymentVoucher, user=None) -> PaymentVoucher:
    pv = _lock_pv(payment_voucher)
    if pv.status != PaymentVoucher.STATUS_SUBMITTED:
        logger.warning("PV approve refused number=%s status=%s", pv.pv_number, pv.status)
        raise PaymentVoucherStateError(f"Only submitted payment vouchers can be approved (status={pv.status})")

    try:
        post_voucher(voucher=pv.journal_voucher, user=user)
    except AccountingServiceError as exc:
        raise PaymentVoucherError(str(exc)) from exc

    pv.status = PaymentVoucher.STATUS_APPROVED
    pv.approved_by = user if getattr(user, "is_authenticated", False) else None
    pv.approved_at = timezone.now()
    pv.save()

    logger.info("Payment voucher approved company=%s number=%s", pv.company_id, pv.pv_number)
    return pv


@transaction.atomic
def reject_payment_voucher(*, payment_voucher: PaymentVoucher, user=None) -> PaymentVoucher:
    pv = _lock_pv(payment_voucher)
    if pv.status != PaymentVoucher.STATUS_SUBMITTED:
        logger.warning("PV reject refused number=%s status=%s", pv.pv_number, pv.status)
        raise PaymentVoucherStateError(f"Only submitted payment vouchers can be rejected (status={pv.status})")

    try:
        reject_voucher(voucher=pv.journal_voucher, user=user)
    except AccountingServiceError as exc:
        raise PaymentVoucherError(str(exc)) from exc

    pv.status = PaymentVoucher.STATUS_REJECTED
    pv.save()

    logger.info("Payment voucher rejected company=%s number=%s", pv.company_id, pv.pv_number)
    return pv
