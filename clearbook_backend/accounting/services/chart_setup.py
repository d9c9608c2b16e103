# accounting/services/chart_setup.py

"""
DEFAULT CHART OF ACCOUNTS

seed_default_chart(company) is idempotent:
- get_or_create by (company, code)
- system roles are only assigned when no other account already holds them
"""

from __future__ import annotations

import logging

from django.db import transaction

from accounting.models.account import Account

logger = logging.getLogger(__name__)

# (code, name, type, system_role, is_control_account)
DEFAULT_ACCOUNTS = [
    # ASSETS
    ("10100", "Cash on Hand", Account.ASSET, Account.CASH, False),
    ("10200", "Bank Account", Account.ASSET, Account.BANK, False),
    ("12000", "Accounts Receivable", Account.ASSET, Account.ACCOUNTS_RECEIVABLE, True),
    ("12050", "VAT Input", Account.ASSET, Account.VAT_INPUT, False),
    ("12100", "WHT Receivable", Account.ASSET, Account.WHT_RECEIVABLE, False),
    ("13000", "Inventory - Raw Materials", Account.ASSET, Account.INVENTORY_RAW_MATERIAL, True),
    ("13100", "Inventory - Finished Goods", Account.ASSET, Account.INVENTORY_FINISHED_GOODS, True),
    ("15000", "Property, Plant & Equipment", Account.ASSET, None, False),
    # LIABILITIES
    ("21000", "Accounts Payable", Account.LIABILITY, Account.ACCOUNTS_PAYABLE, True),
    ("21010", "VAT Payable", Account.LIABILITY, Account.VAT_PAYABLE, False),
    ("21020", "WHT Payable", Account.LIABILITY, Account.WHT_PAYABLE, False),
    # EQUITY
    ("30000", "Share Capital", Account.EQUITY, None, False),
    ("31000", "Retained Earnings", Account.EQUITY, Account.RETAINED_EARNINGS, False),
    ("32000", "Opening Balance Equity", Account.EQUITY, Account.OPENING_BALANCE_EQUITY, False),
    # REVENUE (discounts/returns are contra-revenue)
    ("40000", "Sales Revenue", Account.REVENUE, Account.SALES_REVENUE, False),
    ("40500", "Sales Discounts", Account.REVENUE, Account.SALES_DISCOUNT, False),
    ("40600", "Sales Returns & Allowances", Account.REVENUE, Account.SALES_RETURNS_ALLOWANCES, False),
    ("41000", "Other Income", Account.REVENUE, None, False),
    # COST OF SALES
    ("50000", "Cost of Goods Sold", Account.EXPENSE, Account.COGS, False),
    ("51000", "Direct Labour", Account.EXPENSE, None, False),
    ("52000", "Manufacturing Overhead Applied", Account.EXPENSE, Account.MANUFACTURING_OVERHEAD, False),
    # OPERATING EXPENSES
    ("60000", "Salaries & Wages", Account.EXPENSE, None, False),
    ("61000", "Rent", Account.EXPENSE, None, False),
    ("62000", "Utilities", Account.EXPENSE, None, False),
    ("63000", "Transport & Logistics", Account.EXPENSE, None, False),
    ("64000", "Bank Charges", Account.EXPENSE, None, False),
    ("69000", "General & Administrative", Account.EXPENSE, None, False),
]


@transaction.atomic
def seed_default_chart(company) -> int:
    """
    Returns the number of accounts created.
    """
    created_count = 0
    taken_roles = set(
        Account.objects.filter(company=company, system_role__isnull=False).values_list(
            "system_role", flat=True
        )
    )

    for code, name, account_type, system_role, is_control in DEFAULT_ACCOUNTS:
        role = system_role if system_role and system_role not in taken_roles else None

        acc, acc_created = Account.objects.get_or_create(
            company=company,
            code=code,
            defaults={
                "name": name,
                "account_type": account_type,
                "system_role": role,
                "is_control_account": is_control,
                "is_active": True,
            },
        )

        if acc_created:
            created_count += 1
            if role:
                taken_roles.add(role)

    logger.info("Default chart seeded company=%s created=%s", company.pk, created_count)
    return created_count
