"""Create, update and delete master data records through their ModelForms.

Timestamps are stamped here, in the same call that saves the row.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from django.forms.models import model_to_dict
from django.utils import timezone

from core.exceptions import ConflictError, ValidationError

logger = logging.getLogger(__name__)


def save_record(form_class, data, instance=None):
    """Validate `data` with `form_class` and save.

    Missing keys keep the instance's current values (or the model defaults
    on create), so callers may send partial payloads.
    """
    if not isinstance(data, dict):
        raise ValidationError("Body must be an object.", field="body")

    model = form_class._meta.model
    base = model_to_dict(instance if instance is not None else model(), fields=form_class._meta.fields)
    form = form_class(data={**base, **data}, instance=instance)

    if not form.is_valid():
        errors = form.errors.get_json_data()
        field, messages = next(iter(errors.items()))
        raise ValidationError(
            f"{field}: {messages[0]['message']}",
            field=field,
            errors={k: [m["message"] for m in v] for k, v in errors.items()},
        )

    obj = form.save(commit=False)
    now = timezone.now()
    if obj._state.adding:
        obj.created_at = now
    obj.updated_at = now

    try:
        with transaction.atomic():
            obj.save()
    except IntegrityError as e:
        raise ConflictError(f"Could not save {model._meta.verbose_name}: {e}") from e

    logger.info("%s %s saved", model._meta.verbose_name.capitalize(), obj)
    return obj


def delete_record(obj):
    """Delete a master data row. Rows still referenced by stock or sales are kept."""
    label = f"{obj._meta.verbose_name} {obj}"
    try:
        with transaction.atomic():
            obj.delete()
    except ProtectedError as e:
        raise ConflictError(
            f"Cannot delete {label}: it is still referenced by stock or sales records.",
            referenced_by=sorted({o._meta.verbose_name for o in e.protected_objects}),
        ) from e
    logger.info("Deleted %s", label)
