import functools
import json
import logging

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from .exceptions import BillingError, BusinessRuleError, NotFoundError
from .serializers import bill_summary_to_dict, bill_to_dict
from .services import (build_bill_request, create_bill, filter_bills,
                       pending_bills_for_customer, record_bill_payment,
                       reset_sequence)
from .services.audit_helper import log_action
from .services.records import fetch_bill_detail
from .services.sequence import bill_id_sequence

logger = logging.getLogger(__name__)

# error category -> HTTP status
STATUS_BY_CATEGORY = {
    "bad_input": 400,
    "not_found": 404,
    "conflict": 409,
    "error": 500,
}


def _error(category, message, errors=None):
    return JsonResponse(
        {
            "ok": False,
            "category": category,
            "message": message,
            "errors": errors or [message],
        },
        status=STATUS_BY_CATEGORY[category],
    )


def json_errors(view):
    """Turn the billing error taxonomy into JSON responses."""

    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except ValidationError as e:
            return _error("bad_input", "; ".join(e.messages), e.messages)
        except NotFoundError as e:
            return _error(e.category, e.message)
        except BusinessRuleError as e:
            logger.info("Rejected %s %s: %s", request.method, request.path, e.message)
            return _error(e.category, e.message)
        except BillingError as e:
            return _error("error", e.message)
        except DatabaseError:
            logger.exception("Database failure on %s %s", request.method, request.path)
            return _error("error", "The bill could not be saved. Please try again.")

    return wrapper


def _read_json(request) -> dict:
    try:
        body = json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON.")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object.")
    return body


# ----------------------------
# /api/bills/
# ----------------------------
@require_http_methods(["GET", "POST"])
@json_errors
def bills_view(request):
    if request.method == "POST":
        return _create_bill(request)

    params = request.GET
    # Settlement candidates for the payment screens
    if params.get("getPendingBills") == "true":
        if not params.get("customerId"):
            raise ValidationError("customerId is required for pending bills.")
        bills = pending_bills_for_customer(params.get("customerId"))
        return JsonResponse({"ok": True, "bills": [bill_to_dict(b) for b in bills]})

    bills = filter_bills(
        customer_id=params.get("customerId"),
        payment_status=params.get("paymentStatus"),
        bill_id=params.get("billId"),
        customer_search=params.get("customerSearch"),
        start_date=params.get("startDate"),
        end_date=params.get("endDate"),
        page=params.get("page"),
        limit=params.get("limit"),
    )
    return JsonResponse({"ok": True, "bills": [bill_summary_to_dict(b) for b in bills]})


def _create_bill(request):
    body = _read_json(request)
    items = body.get("items") or []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise ValidationError("items must be a list of objects.")

    bill_request = build_bill_request(
        items=[
            {
                "spare_part": item.get("sparePart"),
                "quantity": item.get("quantity"),
                "unit_price": item.get("unitPrice"),
                "name": item.get("name"),
            }
            for item in items
        ],
        customer=body.get("customer"),
        customer_name=body.get("customerName"),
        customer_phone=body.get("customerPhone"),
        customer_address=body.get("customerAddress"),
        discount_amount=body.get("discountAmount") or 0,
        payments=body.get("payments") or [],
        pending_bills_to_clear=body.get("pendingBillsToClear") or [],
        notes=body.get("notes"),
    )
    result = create_bill(bill_request, user=request.user)
    bill = result.bill
    return JsonResponse(
        {
            "ok": True,
            "message": "Bill created successfully",
            "bill": {
                "id": bill.pk,
                "billId": bill.bill_id,
                "pendingAmount": str(bill.pending_amount),
                "paymentStatus": bill.payment_status,
            },
            "paidBillsHistory": [c.as_dict() for c in result.clearances],
        },
        status=201,
    )


# ----------------------------
# /api/bills/<pk>/
# ----------------------------
@require_http_methods(["GET", "PUT"])
@json_errors
def bill_detail_view(request, pk):
    if request.method == "GET":
        bill = fetch_bill_detail(pk)
        return JsonResponse({"ok": True, "bill": bill_to_dict(bill, expand=True)})

    body = _read_json(request)
    result = record_bill_payment(
        pk,
        payments=body.get("payments") or [],
        settle_bill_ids=body.get("settleBillIds") or [],
        user=request.user,
    )
    return JsonResponse(
        {
            "ok": True,
            "message": "Payment added successfully",
            "bill": bill_to_dict(result.bill, expand=True),
            "paidBillsHistory": [c.as_dict() for c in result.clearances],
        }
    )


# ----------------------------
# /api/bills/counter/
# ----------------------------
@require_http_methods(["DELETE"])
@json_errors
def reset_counter_view(request):
    # destructive: bill ids start over from 1
    if not (request.user.is_authenticated and request.user.is_staff):
        return JsonResponse(
            {"ok": False, "category": "forbidden", "message": "Staff only."},
            status=403,
        )
    counter = reset_sequence(bill_id_sequence())
    log_action(action="reset_counter", instance=counter, user=request.user)
    logger.warning("Counter %s reset by %s", counter.name, request.user)
    return JsonResponse({"ok": True, "message": f"Counter {counter.name} reset.", "seq": counter.seq})
