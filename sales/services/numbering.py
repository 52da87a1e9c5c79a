"""Human readable document numbers: prefix + UTC timestamp + random suffix.

RS20250314093012417, INV20250314093012842.

Numbers are not allocated from a locked counter; uniqueness is enforced by
the unique constraint and a collision is retried with a fresh number.
"""

import logging
import random
from datetime import timezone as dt_timezone

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import ConflictError

logger = logging.getLogger(__name__)


def generate_number(prefix: str, now=None) -> str:
    now = now or timezone.now()
    stamp = now.astimezone(dt_timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{prefix}{stamp}{random.randint(100, 999)}"


def create_numbered(model, number_field: str, prefix: str, **fields):
    """Insert a row with a freshly generated number, retrying on collision.

    Each attempt runs in its own savepoint so a collision does not poison the
    enclosing transaction. After SALE_NUMBER_MAX_ATTEMPTS collisions the
    caller gets a ConflictError and may retry the whole operation.
    """
    attempts = settings.SALE_NUMBER_MAX_ATTEMPTS
    label = model._meta.verbose_name

    for attempt in range(1, attempts + 1):
        number = generate_number(prefix)
        try:
            with transaction.atomic():
                return model.objects.create(**{number_field: number}, **fields)
        except IntegrityError as e:
            if not model.objects.filter(**{number_field: number}).exists():
                raise ConflictError(f"Could not save {label}: {e}") from e
            logger.warning("%s number %s already taken (attempt %s/%s)", label, number, attempt, attempts)

    raise ConflictError(
        f"Could not allocate a unique {label} number after {attempts} attempts.",
        attempts=attempts,
    )
