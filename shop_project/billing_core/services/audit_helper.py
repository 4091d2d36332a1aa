from ..models import AuditLog


def log_action(
    *,
    action: str,
    instance,
    user=None,
    changes: dict | None = None,
):
    """
    Central audit logger.
    Call inside the same transaction as the change it records,
    so a rollback drops the audit row too.
    """
    # anonymous requests carry an AnonymousUser, not a row we can point at
    if user is not None and not getattr(user, "is_authenticated", False):
        user = None

    return AuditLog.objects.create(
        user=user,
        action=action,
        object_type=instance.__class__.__name__,
        object_id=str(instance.pk),
        changes=changes,
    )
