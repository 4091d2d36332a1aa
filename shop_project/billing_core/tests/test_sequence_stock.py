from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.test import TestCase, override_settings

from ..exceptions import InsufficientStock, SparePartNotFound
from ..models import IN_STOCK, OUT_OF_STOCK, Counter, SparePart
from ..services import (bill_id_sequence, decrement_stock, next_value,
                        reset_sequence, set_quantity, stock_status)


class SequenceTests(TestCase):
    def test_first_use_creates_counter(self):
        self.assertFalse(Counter.objects.filter(name="billId").exists())
        self.assertEqual(next_value("billId"), 1)
        self.assertEqual(next_value("billId"), 2)
        self.assertEqual(Counter.objects.get(name="billId").seq, 2)

    def test_counters_are_independent(self):
        next_value("billId")
        next_value("billId")
        self.assertEqual(next_value("receipts"), 1)

    def test_rolled_back_increment_is_not_used(self):
        next_value("billId")
        with self.assertRaises(RuntimeError):
            with transaction.atomic():
                self.assertEqual(next_value("billId"), 2)
                raise RuntimeError("boom")
        self.assertEqual(next_value("billId"), 2)

    def test_reset_starts_over(self):
        for _ in range(3):
            next_value("billId")
        counter = reset_sequence("billId")
        self.assertEqual(counter.seq, 0)
        self.assertEqual(next_value("billId"), 1)

    @override_settings(BILLING={"BILL_ID_SEQUENCE": "shop2_billId"})
    def test_sequence_name_from_settings(self):
        self.assertEqual(bill_id_sequence(), "shop2_billId")


class StockLedgerTests(TestCase):
    def setUp(self):
        self.part = SparePart.objects.create(
            category="Battery", quantity=5, price=Decimal("1500.00"), box_number="B3"
        )

    def test_decrement(self):
        part = decrement_stock(self.part.pk, 2)
        self.assertEqual(part.quantity, 3)
        self.assertEqual(part.status, IN_STOCK)

    def test_decrement_to_zero_is_out_of_stock(self):
        part = decrement_stock(self.part.pk, 5)
        self.assertEqual(part.quantity, 0)
        self.assertEqual(part.status, OUT_OF_STOCK)

    def test_insufficient_stock(self):
        with self.assertRaises(InsufficientStock) as ctx:
            decrement_stock(self.part.pk, 6)
        self.assertEqual(
            ctx.exception.message,
            f"Insufficient stock for {self.part}. Available: 5, Requested: 6.",
        )
        self.part.refresh_from_db()
        self.assertEqual(self.part.quantity, 5)

    def test_missing_part(self):
        with self.assertRaises(SparePartNotFound) as ctx:
            decrement_stock(99999, 1)
        self.assertEqual(ctx.exception.message, "Spare part with ID 99999 not found.")
        self.assertEqual(ctx.exception.category, "not_found")

    def test_non_positive_quantity_rejected(self):
        for quantity in (0, -1):
            with self.subTest(quantity=quantity), self.assertRaises(ValidationError):
                decrement_stock(self.part.pk, quantity)

    def test_set_quantity(self):
        set_quantity(self.part, 0)
        self.part.refresh_from_db()
        self.assertEqual(self.part.status, OUT_OF_STOCK)
        with self.assertRaises(ValidationError):
            set_quantity(self.part, -1)

    def test_status_follows_quantity(self):
        self.assertEqual(stock_status(1), IN_STOCK)
        self.assertEqual(stock_status(0), OUT_OF_STOCK)
