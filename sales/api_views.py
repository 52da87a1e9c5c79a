from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from core.api import api_view, query_datetime, read_json, to_json
from core.permissions import Capability, require_capability
from sales.services import checkout, invoicing, lifecycle, queries


@login_required
@require_http_methods(["GET", "POST"])
@api_view
def api_sales(request):
    """GET lists sales (date_from, date_to, status); POST runs a checkout.

    POST body: {"customer_id": 1, "payment_method": "Cash", "notes": "",
                "items": [{"radiator_id": 1, "warehouse_id": 1, "quantity": 2, "unit_price": "120.00"}]}
    """
    if request.method == "GET":
        require_capability(request.user, Capability.VIEW_STOCK)
        sales = queries.list_sales(
            date_from=query_datetime(request, "date_from"),
            date_to=query_datetime(request, "date_to", end_of_day=True),
            status=request.GET.get("status") or None,
        )
        return JsonResponse({"results": to_json([queries.sale_payload(s) for s in sales])})

    require_capability(request.user, Capability.CREATE_SALE)
    payload = read_json(request)
    sale = checkout.create_sale(
        payload.get("customer_id"),
        payload.get("payment_method"),
        payload.get("items"),
        notes=payload.get("notes"),
        processed_by=request.user,
    )
    return JsonResponse(to_json(queries.sale_payload(sale)), status=201)


@login_required
@require_http_methods(["GET"])
@api_view
def api_sale_detail(request, sale_id: int):
    require_capability(request.user, Capability.VIEW_STOCK)
    return JsonResponse(to_json(queries.sale_payload(queries.get_sale(sale_id))))


@login_required
@require_http_methods(["GET"])
@api_view
def api_sale_receipt(request, sale_id: int):
    require_capability(request.user, Capability.VIEW_STOCK)
    return JsonResponse(to_json(queries.build_receipt(queries.get_sale(sale_id))))


@login_required
@require_http_methods(["POST"])
@api_view
def api_cancel_sale(request, sale_id: int):
    require_capability(request.user, Capability.CANCEL_SALE)
    lifecycle.cancel_sale(sale_id, by=request.user)
    return JsonResponse(to_json(queries.sale_payload(queries.get_sale(sale_id))))


@login_required
@require_http_methods(["POST"])
@api_view
def api_refund_sale(request, sale_id: int):
    require_capability(request.user, Capability.REFUND_SALE)
    lifecycle.refund_sale(sale_id, by=request.user)
    return JsonResponse(to_json(queries.sale_payload(queries.get_sale(sale_id))))


@login_required
@require_http_methods(["POST"])
@api_view
def api_create_invoice(request):
    """Body: {"customer": {"full_name": ...}, "items": [...], "tax_rate": "0.15", "payment_method": "Cash"}"""
    require_capability(request.user, Capability.ISSUE_INVOICE)
    payload = read_json(request)
    invoice = invoicing.generate_invoice(
        payload.get("customer"),
        payload.get("items"),
        tax_rate=payload.get("tax_rate"),
        payment_method=payload.get("payment_method") or "Cash",
        notes=payload.get("notes"),
        created_by=request.user,
    )
    return JsonResponse(to_json(queries.invoice_payload(invoice)), status=201)


@login_required
@require_http_methods(["GET"])
@api_view
def api_invoice_detail(request, invoice_id: int):
    require_capability(request.user, Capability.ISSUE_INVOICE)
    return JsonResponse(to_json(queries.invoice_payload(queries.get_invoice(invoice_id))))
