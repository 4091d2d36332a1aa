from django.core.exceptions import ValidationError
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .models import Bill, BillItem, Payment

""" Block bill deletion if any payments are recorded."""


# pre_delete fires just before Django deletes a model instance,
# including bulk deletes from querysets and the admin
@receiver(pre_delete, sender=Bill)
def prevent_delete_bill_with_payments(sender, instance, **kwargs):
    if Payment.objects.filter(bill=instance).exists():
        raise ValidationError("Cannot delete a bill with recorded payments.")


"""Block deletion of a sold line while its bill is still around."""


@receiver(pre_delete, sender=BillItem)
def prevent_delete_bill_item(sender, instance, **kwargs):
    # cascade from a deletable (payment-free) bill is allowed
    if Payment.objects.filter(bill_id=instance.bill_id).exists():
        raise ValidationError("Cannot delete items of a bill with recorded payments.")
