from django.conf import settings
from django.db import models


# ---------- Audit / Event log ----------
class AuditLog(models.Model):
    # Which user performed the action
    # (Nullable in case the action was automated, e.g. a celery task)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    # Common choices: create_bill, record_payment, settle, reset_counter
    action = models.CharField(max_length=50)
    # What kind of object was affected (e.g., "Bill", "Counter")
    object_type = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    # Details of what changed, in JSON format
    changes = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["object_type", "object_id"], name="auditlog_object_idx"),
            models.Index(fields=["created_at"], name="auditlog_created_idx"),
        ]

    def __str__(self):
        time = self.created_at
        return f"[{time:%Y-%m-%d %H:%M}] {self.user} {self.action} {self.object_type}({self.object_id})"
