# purchases/tests/test_purchasing.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from companies.tests.factories import account, make_company, make_item, make_user
from inventory.models import StockMovement
from purchases.models import GoodsReceivedNote, PurchaseOrder
from purchases.services.purchase_order_service import (
    PurchaseOrderError,
    PurchaseOrderStateError,
    approve_purchase_order,
    cancel_purchase_order,
    create_purchase_order,
)
from purchases.services.receiving_service import PurchaseReceivingError, receive_goods
from purchases.services.supplier_service import SupplierError, create_supplier, set_supplier_opening_balance


class ProcurementFixtureMixin:
    def setUp(self):
        self.company = make_company("ACME")
        self.user = make_user(self.company)
        self.supplier = create_supplier(company=self.company, name="Resin Traders", email="sales@resin.test")
        # 100 on hand at 2.00
        self.resin = make_item(self.company, "RM-RESIN", "raw_material", quantity=100, unit_cost="2")
        self.cap = make_item(self.company, "RM-CAP", "raw_material")

    def order(self, **kwargs):
        kwargs.setdefault("po_date", date(2024, 4, 2))
        kwargs.setdefault(
            "items",
            [
                {"item": self.resin, "quantity": "100", "unit_price": "3", "vat_applicable": True},
                {"item": self.cap, "quantity": "50", "unit_price": "0.5"},
            ],
        )
        return create_purchase_order(company=self.company, supplier=self.supplier, user=self.user, **kwargs)

    def approved(self, **kwargs):
        return approve_purchase_order(purchase_order=self.order(**kwargs), user=self.user)

    def line_for(self, po, item):
        return po.items.get(item=item)


class SupplierTests(ProcurementFixtureMixin, TestCase):
    def test_code_and_opening_balance(self):
        self.assertEqual(self.supplier.supplier_code, "SUP-00001")

        supplier = set_supplier_opening_balance(supplier=self.supplier, amount="750", as_of=date(2024, 1, 1))
        voucher = supplier.opening_balance_voucher
        ap = voucher.lines.get(account=account(self.company, Account.ACCOUNTS_PAYABLE))
        obe = voucher.lines.get(account=account(self.company, Account.OPENING_BALANCE_EQUITY))
        self.assertEqual(ap.credit, Decimal("750.00"))
        self.assertEqual(obe.debit, Decimal("750.00"))

        with self.assertRaises(SupplierError):
            set_supplier_opening_balance(supplier=supplier, amount="1", as_of=date(2024, 1, 1))


class PurchaseOrderTests(ProcurementFixtureMixin, TestCase):
    def test_totals_and_numbering(self):
        po = self.order()
        second = self.order()

        self.assertEqual(po.po_number, "PO-2024-0001")
        self.assertEqual(second.po_number, "PO-2024-0002")
        self.assertEqual(po.status, PurchaseOrder.STATUS_DRAFT)
        self.assertEqual(po.subtotal, Decimal("325.00"))
        self.assertEqual(po.vat_total, Decimal("22.50"))
        self.assertEqual(po.total_amount, Decimal("347.50"))

        resin_line = self.line_for(po, self.resin)
        self.assertEqual(resin_line.vat_rate, Decimal("7.50"))
        self.assertEqual(resin_line.line_total, Decimal("322.50"))
        self.assertEqual(self.line_for(po, self.cap).vat_amount, Decimal("0.00"))

    def test_needs_a_line(self):
        with self.assertRaises(PurchaseOrderError):
            self.order(items=[])

    def test_approve_only_from_draft(self):
        po = self.approved()
        self.assertEqual(po.status, PurchaseOrder.STATUS_APPROVED)
        with self.assertRaises(PurchaseOrderStateError):
            approve_purchase_order(purchase_order=po)

    def test_cancel_draft_and_approved(self):
        self.assertEqual(cancel_purchase_order(purchase_order=self.order()).status, PurchaseOrder.STATUS_CANCELLED)
        self.assertEqual(cancel_purchase_order(purchase_order=self.approved()).status, PurchaseOrder.STATUS_CANCELLED)

    def test_cancel_refused_after_receipt(self):
        po = self.approved()
        receive_goods(purchase_order=po, lines=[{"po_item": self.line_for(po, self.cap), "quantity": "10"}])
        with self.assertRaises(PurchaseOrderStateError):
            cancel_purchase_order(purchase_order=po)


class ReceivingTests(ProcurementFixtureMixin, TestCase):
    def test_partial_then_complete(self):
        po = self.approved()
        resin_line = self.line_for(po, self.resin)
        cap_line = self.line_for(po, self.cap)

        grn = receive_goods(
            purchase_order=po,
            lines=[{"po_item": resin_line, "quantity": "100"}, {"po_item": cap_line, "quantity": "20"}],
            grn_date=date(2024, 4, 10),
            user=self.user,
        )
        po.refresh_from_db()

        self.assertEqual(grn.grn_number, "GRN-20240410-0001")
        self.assertEqual(grn.total_value, Decimal("310.00"))
        self.assertEqual(po.status, PurchaseOrder.STATUS_PARTIALLY_RECEIVED)

        # (100 * 2 + 100 * 3) / 200
        self.resin.refresh_from_db()
        self.assertEqual(self.resin.quantity_on_hand, Decimal("200"))
        self.assertEqual(self.resin.average_unit_cost, Decimal("2.5000"))
        self.assertTrue(
            StockMovement.objects.filter(
                item=self.resin,
                movement_type=StockMovement.MovementType.RECEIPT,
                reference=grn.grn_number,
            ).exists()
        )

        voucher = grn.journal_voucher
        self.assertEqual(voucher.source, JournalVoucher.SOURCE_GOODS_RECEIVED)
        rm_inventory = account(self.company, Account.INVENTORY_RAW_MATERIAL)
        self.assertEqual(voucher.lines.get(account=rm_inventory).debit, Decimal("310.00"))
        self.assertEqual(
            voucher.lines.get(account=account(self.company, Account.ACCOUNTS_PAYABLE)).credit,
            Decimal("310.00"),
        )

        second = receive_goods(purchase_order=po, lines=[{"po_item": cap_line, "quantity": "30"}], grn_date=date(2024, 4, 10))
        po.refresh_from_db()
        self.assertEqual(second.grn_number, "GRN-20240410-0002")
        self.assertEqual(po.status, PurchaseOrder.STATUS_COMPLETED)

    def test_over_receipt_is_refused(self):
        po = self.approved()
        cap_line = self.line_for(po, self.cap)
        receive_goods(purchase_order=po, lines=[{"po_item": cap_line, "quantity": "40"}])

        with self.assertRaises(PurchaseReceivingError):
            receive_goods(purchase_order=po, lines=[{"po_item": cap_line, "quantity": "11"}])

        cap_line.refresh_from_db()
        self.assertEqual(cap_line.quantity_received, Decimal("40"))
        self.assertEqual(GoodsReceivedNote.objects.filter(purchase_order=po).count(), 1)

    def test_draft_and_cancelled_orders_cannot_receive(self):
        draft = self.order()
        with self.assertRaises(PurchaseReceivingError):
            receive_goods(purchase_order=draft, lines=[{"po_item": self.line_for(draft, self.cap), "quantity": "1"}])

        cancelled = cancel_purchase_order(purchase_order=self.approved())
        with self.assertRaises(PurchaseReceivingError):
            receive_goods(
                purchase_order=cancelled,
                lines=[{"po_item": self.line_for(cancelled, self.cap), "quantity": "1"}],
            )

    def test_line_from_another_order_is_refused(self):
        po = self.approved()
        other = self.approved()
        with self.assertRaises(PurchaseReceivingError):
            receive_goods(purchase_order=po, lines=[{"po_item": self.line_for(other, self.cap), "quantity": "1"}])
