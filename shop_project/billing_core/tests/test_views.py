import json
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse

from ..models import Bill, Counter
from .helpers import BillingFixtures


class BillApiTests(BillingFixtures, TestCase):
    def setUp(self):
        self.customer = self.make_customer()
        self.display = self.make_part("Display", quantity=10, price="100.00")
        self.battery = self.make_part("Battery", quantity=1, price="50.00")

    def post_bill(self, **body):
        payload = {
            "customer": self.customer.pk,
            "items": [{"sparePart": self.display.pk, "quantity": 2, "unitPrice": 100}],
        }
        payload.update(body)
        return self.client.post(
            reverse("bills"), data=json.dumps(payload), content_type="application/json"
        )

    def put_payment(self, pk, **body):
        return self.client.put(
            reverse("bill-detail", args=[pk]),
            data=json.dumps(body),
            content_type="application/json",
        )

    def test_create_bill(self):
        old = self.make_old_bill(self.customer, self.display, "100", days_ago=1)
        resp = self.post_bill(
            payments=[{"amount": 250, "source": "Cash"}],
            pendingBillsToClear=[old.pk],
        )
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertTrue(data["ok"])
        self.assertEqual(data["bill"]["pendingAmount"], "50.00")
        self.assertEqual(data["bill"]["paymentStatus"], "Partially Paid")
        self.assertEqual(
            data["paidBillsHistory"],
            [{"billId": old.bill_id, "amountCleared": "100.00", "newPendingAmount": "0.00"}],
        )

    def test_create_bill_for_new_customer(self):
        resp = self.post_bill(customer=None, customerName="Ravi", customerPhone="9000000009")
        self.assertEqual(resp.status_code, 201)
        bill = Bill.objects.get(pk=resp.json()["bill"]["id"])
        self.assertEqual(bill.customer_name, "Ravi")

    def test_bad_input_is_400(self):
        resp = self.client.post(reverse("bills"), data="{not json", content_type="application/json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["category"], "bad_input")

        resp = self.post_bill(items=[])
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["ok"])

    def test_out_of_range_amounts_are_400(self):
        before = self.display.quantity
        for amount in ("1e30", "99999999999"):
            with self.subTest(amount=amount):
                resp = self.post_bill(payments=[{"amount": amount, "source": "Cash"}])
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.json()["category"], "bad_input")
                self.assertIn("Invalid amount", resp.json()["message"])

        bill = self.make_bill(self.customer, [(self.display, 1, "100")]).bill
        resp = self.put_payment(bill.pk, payments=[{"amount": "1e30", "source": "Cash"}])
        self.assertEqual(resp.status_code, 400)
        self.display.refresh_from_db()
        self.assertEqual(self.display.quantity, before - 1)

    def test_unknown_part_is_404(self):
        resp = self.post_bill(items=[{"sparePart": 99999, "quantity": 1}])
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["category"], "not_found")
        self.assertEqual(resp.json()["message"], "Spare part with ID 99999 not found.")

    def test_insufficient_stock_is_409(self):
        resp = self.post_bill(items=[{"sparePart": self.battery.pk, "quantity": 2}])
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["category"], "conflict")
        self.assertIn("Available: 1, Requested: 2", resp.json()["message"])

    def test_database_failure_is_500(self):
        with mock.patch("billing_core.views.create_bill", side_effect=DatabaseError("down")):
            resp = self.post_bill()
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["category"], "error")

    def test_detail_and_payment(self):
        bill = self.make_bill(self.customer, [(self.display, 2, "100")]).bill

        resp = self.client.get(reverse("bill-detail", args=[bill.pk]))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["bill"]
        self.assertEqual(data["billId"], bill.bill_id)
        self.assertEqual(data["customer"]["name"], "Asha")
        self.assertEqual(data["items"][0]["sparePart"]["category"], "Display")

        resp = self.put_payment(bill.pk, payments=[{"amount": "200", "source": "Card"}])
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["bill"]
        self.assertEqual(data["paymentStatus"], "Fully Paid")
        self.assertEqual(data["payments"][0]["source"], "Card")

    def test_overpayment_is_409_with_amounts(self):
        bill = self.make_bill(self.customer, [(self.display, 2, "100")]).bill
        resp = self.put_payment(bill.pk, payments=[{"amount": "200.50", "source": "Cash"}])
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(
            resp.json()["message"],
            "Payment amount (₹200.50) exceeds the pending balance (₹200.00).",
        )
        bill.refresh_from_db()
        self.assertEqual(bill.amount_paid, Decimal("0.00"))

    def test_unknown_bill_is_404(self):
        self.assertEqual(self.client.get(reverse("bill-detail", args=[99999])).status_code, 404)
        resp = self.put_payment(99999, payments=[{"amount": "1", "source": "Cash"}])
        self.assertEqual(resp.status_code, 404)

    def test_list_and_filters(self):
        first = self.make_bill(self.customer, [(self.display, 1, "100")]).bill
        second = self.make_bill(
            self.customer,
            [(self.display, 1, "100")],
            payments=[{"amount": "100", "source": "Cash"}],
        ).bill

        resp = self.client.get(reverse("bills"))
        self.assertEqual([b["billId"] for b in resp.json()["bills"]], [second.bill_id, first.bill_id])

        resp = self.client.get(reverse("bills"), {"paymentStatus": "Unpaid"})
        self.assertEqual([b["billId"] for b in resp.json()["bills"]], [first.bill_id])

        resp = self.client.get(reverse("bills"), {"customerSearch": "asha", "limit": 1, "page": 2})
        self.assertEqual([b["billId"] for b in resp.json()["bills"]], [first.bill_id])

        resp = self.client.get(reverse("bills"), {"page": 5})
        self.assertEqual(resp.json()["bills"], [])

        for bad in ({"limit": "x"}, {"startDate": "yesterday"}, {"paymentStatus": "Owed"}):
            with self.subTest(params=bad):
                self.assertEqual(self.client.get(reverse("bills"), bad).status_code, 400)

    def test_pending_bills_oldest_first(self):
        newer = self.make_old_bill(self.customer, self.display, "40", days_ago=1)
        older = self.make_old_bill(self.customer, self.display, "60", days_ago=4)
        self.make_bill(
            self.customer, [(self.display, 1, "10")], payments=[{"amount": "10", "source": "UPI"}]
        )

        resp = self.client.get(
            reverse("bills"), {"getPendingBills": "true", "customerId": self.customer.pk}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            [b["billId"] for b in resp.json()["bills"]], [older.bill_id, newer.bill_id]
        )

        resp = self.client.get(reverse("bills"), {"getPendingBills": "true"})
        self.assertEqual(resp.status_code, 400)

    def test_method_not_allowed(self):
        self.assertEqual(self.client.delete(reverse("bills")).status_code, 405)


class CounterResetApiTests(TestCase):
    def setUp(self):
        Counter.objects.create(name="billId", seq=12)
        User = get_user_model()
        self.staff = User.objects.create_user("staff", password="x", is_staff=True)
        self.clerk = User.objects.create_user("clerk", password="x")

    def test_anonymous_and_non_staff_refused(self):
        self.assertEqual(self.client.delete(reverse("bill-counter")).status_code, 403)
        self.client.force_login(self.clerk)
        self.assertEqual(self.client.delete(reverse("bill-counter")).status_code, 403)
        self.assertEqual(Counter.objects.get(name="billId").seq, 12)

    def test_staff_resets(self):
        self.client.force_login(self.staff)
        resp = self.client.delete(reverse("bill-counter"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["seq"], 0)
        self.assertEqual(Counter.objects.get(name="billId").seq, 0)
