from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from core.api import api_view, query_bool, query_datetime, query_int, read_json, to_json
from core.exceptions import ValidationError
from core.permissions import Capability, require_capability
from inventory.services import ledger, reporting


@login_required
@require_http_methods(["GET"])
@api_view
def api_radiator_stock(request, radiator_id: int):
    require_capability(request.user, Capability.VIEW_STOCK)
    return JsonResponse(to_json(ledger.get_radiator_stock(radiator_id)))


@login_required
@require_http_methods(["POST"])
@api_view
def api_adjust_stock(request, radiator_id: int):
    """Body: {"warehouse_code": "WH_AKL", "quantity": 10, "reason": "...", "notes": "..."}"""
    require_capability(request.user, Capability.ADJUST_STOCK)
    payload = read_json(request)

    adjustment = ledger.adjust_stock(
        radiator_id,
        payload.get("warehouse_code"),
        payload.get("quantity"),
        reason=payload.get("reason"),
        updated_by=request.user,
        notes=payload.get("notes"),
    )
    return JsonResponse(to_json(adjustment.as_dict()))


@login_required
@require_http_methods(["POST"])
@api_view
def api_bulk_adjust_stock(request):
    """Body: {"items": [{"radiator_id": 1, "warehouse_code": "WH_AKL", "quantity": 4}, ...]}

    Always 200; failed items are listed in "errors".
    """
    require_capability(request.user, Capability.ADJUST_STOCK)
    payload = read_json(request)

    items = payload.get("items")
    if not isinstance(items, list):
        raise ValidationError("items must be a list.", field="items")

    result = ledger.bulk_adjust_stock(items, updated_by=request.user, reason=payload.get("reason"))
    return JsonResponse(to_json(result.as_dict()))


@login_required
@require_http_methods(["GET"])
@api_view
def api_stock_status(request):
    require_capability(request.user, Capability.VIEW_STOCK)
    quantity = query_int(request, "quantity")
    if quantity is None:
        raise ValidationError("quantity is required.", field="quantity")
    return JsonResponse({"quantity": quantity, "status": ledger.get_stock_status(quantity)})


@login_required
@require_http_methods(["GET"])
@api_view
def api_stock_summary(request):
    require_capability(request.user, Capability.VIEW_STOCK)
    return JsonResponse(to_json(reporting.stock_summary()))


@login_required
@require_http_methods(["GET"])
@api_view
def api_low_stock(request):
    require_capability(request.user, Capability.VIEW_STOCK)
    items = reporting.low_stock_items(query_int(request, "threshold"))
    return JsonResponse({"results": to_json(items)})


@login_required
@require_http_methods(["GET"])
@api_view
def api_out_of_stock(request):
    require_capability(request.user, Capability.VIEW_STOCK)
    return JsonResponse({"results": to_json(reporting.out_of_stock_items())})


@login_required
@require_http_methods(["GET"])
@api_view
def api_warehouse_stock(request, code: str):
    require_capability(request.user, Capability.VIEW_STOCK)
    return JsonResponse(to_json(reporting.warehouse_stock(code)))


@login_required
@require_http_methods(["GET"])
@api_view
def api_radiators_with_stock(request):
    require_capability(request.user, Capability.VIEW_STOCK)
    rows = reporting.radiators_with_stock(
        search=request.GET.get("search"),
        low_stock_only=query_bool(request, "low_stock_only"),
        warehouse_code=request.GET.get("warehouse_code") or None,
    )
    return JsonResponse({"results": to_json(rows)})


@login_required
@require_http_methods(["GET"])
@api_view
def api_stock_movements(request):
    require_capability(request.user, Capability.VIEW_STOCK)
    page = reporting.stock_movements(
        radiator_id=query_int(request, "radiator_id"),
        warehouse_code=request.GET.get("warehouse_code") or None,
        date_from=query_datetime(request, "date_from"),
        date_to=query_datetime(request, "date_to", end_of_day=True),
        movement_type=request.GET.get("movement_type") or None,
        page=query_int(request, "page", 1),
        page_size=query_int(request, "page_size"),
    )
    return JsonResponse(to_json(page.as_dict()))
