# Plain dict payloads for JsonResponse; keys keep the camelCase the
# billing screens already read.


def _money(value):
    return str(value) if value is not None else None


def customer_to_dict(customer):
    return {
        "id": customer.pk,
        "name": customer.name,
        "phone": customer.phone,
        "address": customer.address,
    }


def spare_part_to_dict(part):
    return {
        "id": part.pk,
        "category": part.category,
        "deviceModel": part.device_model,
        "brand": part.brand,
        "boxNumber": part.box_number,
        "quantity": part.quantity,
        "price": _money(part.price),
        "status": part.status,
    }


def payment_to_dict(payment):
    return {
        "amount": _money(payment.amount),
        "kind": payment.kind,
        "source": payment.source,
        "date": payment.date.isoformat(),
        "sourceBillIds": payment.source_bill_ids or [],
    }


def item_to_dict(item, expand=False):
    data = {
        "sparePart": item.spare_part_id,
        "name": item.name,
        "deviceModel": item.device_model,
        "brand": item.brand,
        "boxNumber": item.box_number,
        "quantity": item.quantity,
        "unitPrice": _money(item.unit_price),
        "subtotal": _money(item.subtotal),
    }
    if expand:
        data["sparePart"] = spare_part_to_dict(item.spare_part)
    return data


def bill_to_dict(bill, expand=False):
    """`expand` inlines the customer and spare part records."""
    return {
        "id": bill.pk,
        "billId": bill.bill_id,
        "customer": customer_to_dict(bill.customer) if expand else bill.customer_id,
        "customerName": bill.customer_name,
        "customerPhone": bill.customer_phone,
        "items": [item_to_dict(i, expand=expand) for i in bill.items.all()],
        "totalAmount": _money(bill.total_amount),
        "discountAmount": _money(bill.discount_amount),
        "amountPaid": _money(bill.amount_paid),
        "pendingAmount": _money(bill.pending_amount),
        "paymentStatus": bill.payment_status,
        "payments": [payment_to_dict(p) for p in bill.payments.all()],
        "notes": bill.notes,
        "createdAt": bill.created_at.isoformat(),
        "updatedAt": bill.updated_at.isoformat() if bill.updated_at else None,
    }


def bill_summary_to_dict(bill):
    return {
        "id": bill.pk,
        "billId": bill.bill_id,
        "customer": customer_to_dict(bill.customer),
        "customerName": bill.customer_name,
        "customerPhone": bill.customer_phone,
        "totalAmount": _money(bill.total_amount),
        "amountPaid": _money(bill.amount_paid),
        "pendingAmount": _money(bill.pending_amount),
        "paymentStatus": bill.payment_status,
        "createdAt": bill.created_at.isoformat(),
    }
