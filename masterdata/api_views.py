from django.contrib.auth.decorators import login_required
from django.db.models import Q
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from core.api import api_view, query_bool, read_json, to_json
from core.exceptions import NotFoundError
from core.permissions import Capability, require_capability
from masterdata.forms.customerForm import CustomerForm
from masterdata.forms.radiatorForm import RadiatorForm
from masterdata.forms.warehouseForm import WarehouseForm
from masterdata.models import Customer, Radiator, Warehouse
from masterdata.services.catalog import delete_record, save_record
from masterdata.services.directory import resolve_radiator, resolve_warehouse


def _warehouse_dict(w):
    return {
        "id": w.id,
        "code": w.code,
        "name": w.name,
        "location": w.location,
        "address": w.address,
        "phone": w.phone,
        "email": w.email,
        "created_at": w.created_at,
        "updated_at": w.updated_at,
    }


def _radiator_dict(r):
    return {
        "id": r.id,
        "brand": r.brand,
        "code": r.code,
        "name": r.name,
        "year": r.year,
        "retail_price": r.retail_price,
        "trade_price": r.trade_price,
        "cost_price": r.cost_price,
        "is_price_overridable": r.is_price_overridable,
        "max_discount_percent": r.max_discount_percent,
        "product_type": r.product_type,
        "dimensions": r.dimensions,
        "notes": r.notes,
        "created_at": r.created_at,
        "updated_at": r.updated_at,
    }


def _customer_dict(c):
    return {
        "id": c.id,
        "first_name": c.first_name,
        "last_name": c.last_name,
        "full_name": c.full_name,
        "email": c.email,
        "phone": c.phone,
        "company": c.company,
        "address": c.address,
        "is_active": c.is_active,
        "created_at": c.created_at,
        "updated_at": c.updated_at,
    }


def _get_customer(pk):
    try:
        return Customer.objects.get(pk=pk)
    except Customer.DoesNotExist:
        raise NotFoundError("Customer", pk) from None


@login_required
@require_http_methods(["GET", "POST"])
@api_view
def api_warehouses(request):
    if request.method == "GET":
        require_capability(request.user, Capability.VIEW_STOCK)
        return JsonResponse({"results": to_json([_warehouse_dict(w) for w in Warehouse.objects.all()])})

    require_capability(request.user, Capability.MANAGE_CATALOG)
    warehouse = save_record(WarehouseForm, read_json(request))
    return JsonResponse(to_json(_warehouse_dict(warehouse)), status=201)


@login_required
@require_http_methods(["GET", "PUT", "DELETE"])
@api_view
def api_warehouse_detail(request, code: str):
    warehouse = resolve_warehouse(code)

    if request.method == "GET":
        require_capability(request.user, Capability.VIEW_STOCK)
    elif request.method == "PUT":
        require_capability(request.user, Capability.MANAGE_CATALOG)
        warehouse = save_record(WarehouseForm, read_json(request), instance=warehouse)
    else:
        require_capability(request.user, Capability.DELETE_CATALOG)
        delete_record(warehouse)
        return HttpResponse(status=204)

    return JsonResponse(to_json(_warehouse_dict(warehouse)))


@login_required
@require_http_methods(["GET", "POST"])
@api_view
def api_radiators(request):
    if request.method == "GET":
        require_capability(request.user, Capability.VIEW_STOCK)
        qs = Radiator.objects.all()
        search = (request.GET.get("search") or "").strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(code__icontains=search) | Q(brand__icontains=search))
        return JsonResponse({"results": to_json([_radiator_dict(r) for r in qs])})

    require_capability(request.user, Capability.MANAGE_CATALOG)
    radiator = save_record(RadiatorForm, read_json(request))
    return JsonResponse(to_json(_radiator_dict(radiator)), status=201)


@login_required
@require_http_methods(["GET", "PUT", "DELETE"])
@api_view
def api_radiator_detail(request, radiator_id: int):
    radiator = resolve_radiator(radiator_id)

    if request.method == "GET":
        require_capability(request.user, Capability.VIEW_STOCK)
    elif request.method == "PUT":
        require_capability(request.user, Capability.MANAGE_CATALOG)
        radiator = save_record(RadiatorForm, read_json(request), instance=radiator)
    else:
        require_capability(request.user, Capability.DELETE_CATALOG)
        delete_record(radiator)
        return HttpResponse(status=204)

    return JsonResponse(to_json(_radiator_dict(radiator)))


@login_required
@require_http_methods(["GET", "POST"])
@api_view
def api_customers(request):
    if request.method == "GET":
        require_capability(request.user, Capability.VIEW_STOCK)
        qs = Customer.objects.all()
        if not query_bool(request, "include_inactive"):
            qs = qs.filter(is_active=True)
        search = (request.GET.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(first_name__icontains=search) | Q(last_name__icontains=search)
                | Q(email__icontains=search) | Q(phone__icontains=search) | Q(company__icontains=search)
            )
        return JsonResponse({"results": to_json([_customer_dict(c) for c in qs])})

    require_capability(request.user, Capability.MANAGE_CATALOG)
    customer = save_record(CustomerForm, read_json(request))
    return JsonResponse(to_json(_customer_dict(customer)), status=201)


@login_required
@require_http_methods(["GET", "PUT", "DELETE"])
@api_view
def api_customer_detail(request, customer_id: int):
    customer = _get_customer(customer_id)

    if request.method == "GET":
        require_capability(request.user, Capability.VIEW_STOCK)
    elif request.method == "PUT":
        require_capability(request.user, Capability.MANAGE_CATALOG)
        customer = save_record(CustomerForm, read_json(request), instance=customer)
    else:
        require_capability(request.user, Capability.DELETE_CATALOG)
        delete_record(customer)
        return HttpResponse(status=204)

    return JsonResponse(to_json(_customer_dict(customer)))
