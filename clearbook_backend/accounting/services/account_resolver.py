# PATH: accounting/services/account_resolver.py

"""
ACCOUNT RESOLVER (AUTHORITATIVE)

Answers ONE question:
"Which account should this company use for this purpose?"

Purposes are system roles (Account.CASH, Account.ACCOUNTS_RECEIVABLE, ...).
Each company maps a role to at most one active account.

Hard-fail on missing setup: posting to a guessed account is worse than
refusing to post.
"""

from __future__ import annotations

from accounting.models.account import Account
from accounting.services.exceptions import AccountResolutionError


def get_account_by_role(company, system_role: str) -> Account:
    try:
        return Account.objects.get(company=company, system_role=system_role, is_active=True)
    except Account.DoesNotExist as exc:
        raise AccountResolutionError(
            f"No active account with system role {system_role} for company {company.pk}. "
            "Assign the role in the chart of accounts."
        ) from exc


def get_account_by_code(company, code: str) -> Account:
    code = (code or "").strip()
    if not code:
        raise AccountResolutionError("Account code is required")
    try:
        return Account.objects.get(company=company, code=code, is_active=True)
    except Account.DoesNotExist as exc:
        raise AccountResolutionError(
            f"Account with code={code} not found for company {company.pk}"
        ) from exc


def get_account_by_id(company, account_id) -> Account:
    try:
        return Account.objects.get(company=company, pk=account_id, is_active=True)
    except (Account.DoesNotExist, ValueError, TypeError) as exc:
        raise AccountResolutionError(f"Account {account_id} not found") from exc


# Semantic shortcuts used by posting services
def get_cash_account(company) -> Account:
    return get_account_by_role(company, Account.CASH)


def get_bank_account(company) -> Account:
    return get_account_by_role(company, Account.BANK)


def get_receivable_account(company) -> Account:
    return get_account_by_role(company, Account.ACCOUNTS_RECEIVABLE)


def get_payable_account(company) -> Account:
    return get_account_by_role(company, Account.ACCOUNTS_PAYABLE)


def get_sales_revenue_account(company) -> Account:
    return get_account_by_role(company, Account.SALES_REVENUE)


def get_cogs_account(company) -> Account:
    return get_account_by_role(company, Account.COGS)


def get_opening_balance_equity_account(company) -> Account:
    return get_account_by_role(company, Account.OPENING_BALANCE_EQUITY)


def get_retained_earnings_account(company) -> Account:
    return get_account_by_role(company, Account.RETAINED_EARNINGS)


def get_default_inventory_account(company, item_type: str) -> Account:
    role = (
        Account.INVENTORY_RAW_MATERIAL
        if item_type == "raw_material"
        else Account.INVENTORY_FINISHED_GOODS
    )
    return get_account_by_role(company, role)
