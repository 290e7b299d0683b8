"""Utility functions for audit logging, soft deletes and shared view plumbing"""
import logging

from django.db import IntegrityError

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, upload, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., project number)
    """
    if not action or not model_name or object_id is None:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    audit_user = user
    if audit_user is None and request is not None and hasattr(request, 'user'):
        audit_user = request.user

    try:
        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            changes=changes or {},
            ip_address=get_client_ip(request) if request else None,
        )
    except Exception as e:
        # Audit logging must not fail the main operation
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def diff_fields(instance, field_names, before):
    """Return {field: {'old': ..., 'new': ...}} for fields whose value changed"""
    changes = {}
    for name in field_names:
        new_value = getattr(instance, name, None)
        if before.get(name) != new_value:
            changes[name] = {'old': _jsonable(before.get(name)), 'new': _jsonable(new_value)}
    return changes


def snapshot(instance, field_names):
    return {name: getattr(instance, name, None) for name in field_names}


def _jsonable(value):
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if hasattr(value, 'pk'):
        return value.pk
    return str(value)


def soft_delete(instance, request=None, object_name=None):
    """Flip is_live off and record it; the row is kept"""
    if not instance.is_live:
        return instance
    instance.is_live = False
    instance.save(update_fields=['is_live', 'updated_at'] if hasattr(instance, 'updated_at') else ['is_live'])
    create_audit_log(
        request=request,
        action='delete',
        model_name=instance.__class__.__name__,
        object_id=instance.pk,
        object_name=object_name or str(instance),
        changes={'is_live': {'old': True, 'new': False}},
    )
    return instance


def integrity_error_message(error, default='A record with these values already exists'):
    """Map a database IntegrityError to a client-facing message"""
    if not isinstance(error, IntegrityError):
        return default
    message = str(error)
    if 'unique' in message.lower():
        return default
    return 'Database error occurred while saving'


def parse_bool(value):
    """Query-string boolean: 'true'/'1'/'yes' -> True, 'false'/'0'/'no' -> False, else None"""
    if value is None:
        return None
    lowered = str(value).strip().lower()
    if lowered in ('true', '1', 'yes'):
        return True
    if lowered in ('false', '0', 'no'):
        return False
    return None
