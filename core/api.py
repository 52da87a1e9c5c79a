"""Helpers for the JSON API views.

Error payloads always look like {"code": ..., "detail": ..., **details}.
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from functools import wraps

from django.http import JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from core.exceptions import InventoryError, ValidationError

logger = logging.getLogger(__name__)


def api_error(status_code: int, code: str, detail: str, **extra) -> JsonResponse:
    """Create a JsonResponse with a normalized error payload."""
    return JsonResponse({"code": code, "detail": detail, **extra}, status=status_code)


def api_view(view):
    """Translate service errors into JSON error responses.

    Unexpected exceptions are logged and reported as a 500 without leaking internals.
    """

    @wraps(view)
    def wrapped(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except InventoryError as e:
            return JsonResponse(e.as_dict(), status=e.status_code)
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return api_error(500, "server_error", "Unexpected error")

    return wrapped


def read_json(request) -> dict:
    try:
        payload = json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError) as e:
        raise ValidationError(f"Malformed JSON body: {e}", field="body") from e
    if not isinstance(payload, dict):
        raise ValidationError("JSON body must be an object.", field="body")
    return payload


def query_int(request, name, default=None):
    raw = request.GET.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError(f"{name} must be an integer.", field=name) from e


def query_bool(request, name) -> bool:
    return (request.GET.get(name) or "false").lower() in ("1", "true", "yes", "on")


def query_datetime(request, name, end_of_day=False):
    """Accept YYYY-MM-DD or an ISO timestamp.

    A bare date means the start of that day, or its last microsecond with end_of_day.
    """
    raw = (request.GET.get(name) or "").strip()
    if not raw:
        return None
    try:
        value = parse_datetime(raw)
        day = None if value is not None else parse_date(raw)
    except ValueError:
        value = day = None
    if value is None:
        if day is None:
            raise ValidationError(f"{name} must be a date (YYYY-MM-DD) or ISO timestamp.", field=name)
        value = datetime.combine(day, datetime.max.time() if end_of_day else datetime.min.time())
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def to_json(value):
    """Recursively make service results JSON friendly (Decimal as string, dates as ISO)."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value
