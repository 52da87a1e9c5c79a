"""Administrative status changes of a sale.

Cancel only changes the status. Refund changes the status and puts every
line's quantity back into the warehouse it was sold from, in the same
transaction.
"""

import logging

from django.db import transaction
from django.utils import timezone
from django_fsm import can_proceed

from core.exceptions import ConflictError, NotFoundError, ValidationError
from inventory.services.ledger import restock_for_refund
from sales.models import Sale

logger = logging.getLogger(__name__)


def _lock_sale(sale_id) -> Sale:
    if isinstance(sale_id, bool) or not isinstance(sale_id, int):
        raise ValidationError("sale_id must be an integer id.", field="sale_id")
    try:
        return Sale.objects.select_for_update().get(pk=sale_id)
    except Sale.DoesNotExist:
        raise NotFoundError("Sale", sale_id) from None


def _actor(user):
    if user is None or not user.is_authenticated:
        return None
    return user


def _ensure_can(sale, transition_method, verb):
    if not can_proceed(transition_method):
        raise ConflictError(
            f"Sale {sale.sale_number} cannot be {verb} from status '{sale.status}'.",
            sale_number=sale.sale_number,
            status=sale.status,
        )


@transaction.atomic
def cancel_sale(sale_id, by=None) -> Sale:
    sale = _lock_sale(sale_id)
    _ensure_can(sale, sale.cancel, "cancelled")

    sale.cancel(by=_actor(by))
    sale.updated_at = timezone.now()
    sale.save()

    logger.info("Sale %s cancelled by %s", sale.sale_number, by)
    return sale


@transaction.atomic
def refund_sale(sale_id, by=None) -> Sale:
    """Refund a completed sale and restock its lines."""
    sale = _lock_sale(sale_id)
    _ensure_can(sale, sale.refund, "refunded")

    actor = _actor(by)
    items = sorted(sale.items.all(), key=lambda i: (i.radiator_id, i.warehouse_id))
    for item in items:
        restock_for_refund(item.radiator_id, item.warehouse_id, item.quantity, sale, updated_by=actor)

    sale.refund(by=actor)
    sale.updated_at = timezone.now()
    sale.save()

    logger.info("Sale %s refunded by %s, %s lines restocked", sale.sale_number, by, len(items))
    return sale
