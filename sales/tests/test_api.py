from django.urls import reverse

from inventory.models import StockLevel
from sales.models import Sale


def _checkout(client, customer, radiator, warehouse, quantity=2):
    return client.post(
        reverse("sales_api:sales"),
        {
            "customer_id": customer.pk,
            "payment_method": "Card",
            "items": [
                {"radiator_id": radiator.pk, "warehouse_id": warehouse.pk, "quantity": quantity, "unit_price": "420.00"}
            ],
        },
        content_type="application/json",
    )


def test_checkout_endpoint(staff_client, stocked, customer):
    radiator, warehouse = stocked

    response = _checkout(staff_client, customer, radiator, warehouse)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "completed"
    assert body["total_amount"] == "966.00"
    assert body["processed_by"] == "staff"
    assert body["items"][0]["warehouse_code"] == "WH_AKL"
    assert StockLevel.objects.get().quantity == 8


def test_checkout_insufficient_stock_is_409(staff_client, stocked, customer):
    radiator, warehouse = stocked

    response = _checkout(staff_client, customer, radiator, warehouse, quantity=11)

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "insufficient_stock"
    assert body["requested"] == 11
    assert body["available"] == 10
    assert not Sale.objects.exists()


def test_list_detail_and_receipt(staff_client, stocked, customer, settings):
    radiator, warehouse = stocked
    sale_id = _checkout(staff_client, customer, radiator, warehouse).json()["id"]

    listing = staff_client.get(reverse("sales_api:sales"), {"status": "completed"}).json()["results"]
    assert [s["id"] for s in listing] == [sale_id]
    assert staff_client.get(reverse("sales_api:sales"), {"status": "refunded"}).json()["results"] == []

    detail = staff_client.get(reverse("sales_api:sale-detail", args=[sale_id])).json()
    assert detail["customer"]["full_name"] == "Aroha Ngata"

    receipt = staff_client.get(reverse("sales_api:sale-receipt", args=[sale_id])).json()
    assert receipt["company"]["name"] == settings.RECEIPT_COMPANY["name"]
    assert receipt["sale"]["sale_number"] == detail["sale_number"]


def test_unknown_sale_is_404(staff_client, db):
    assert staff_client.get(reverse("sales_api:sale-detail", args=[999])).status_code == 404


def test_staff_cannot_refund_or_cancel(staff_client, stocked, customer):
    radiator, warehouse = stocked
    sale_id = _checkout(staff_client, customer, radiator, warehouse).json()["id"]

    for name in ("sales_api:sale-refund", "sales_api:sale-cancel"):
        response = staff_client.post(reverse(name, args=[sale_id]))
        assert response.status_code == 403
        assert response.json()["capability"] in ("refund_sale", "cancel_sale")

    assert Sale.objects.get().status == Sale.Status.COMPLETED


def test_admin_refund_then_cancel_conflicts(client, shop_admin, stocked, customer):
    radiator, warehouse = stocked
    client.force_login(shop_admin)
    sale_id = _checkout(client, customer, radiator, warehouse).json()["id"]

    refunded = client.post(reverse("sales_api:sale-refund", args=[sale_id]))
    assert refunded.status_code == 200
    assert refunded.json()["status"] == "refunded"
    assert StockLevel.objects.get().quantity == 10

    conflict = client.post(reverse("sales_api:sale-cancel", args=[sale_id]))
    assert conflict.status_code == 409
    assert conflict.json()["status"] == "refunded"


def test_superuser_can_cancel(admin_client, stocked, customer):
    radiator, warehouse = stocked
    sale_id = _checkout(admin_client, customer, radiator, warehouse).json()["id"]

    response = admin_client.post(reverse("sales_api:sale-cancel", args=[sale_id]))

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert StockLevel.objects.get().quantity == 8


def test_invoice_endpoints(staff_client, stocked):
    radiator, warehouse = stocked

    response = staff_client.post(
        reverse("sales_api:invoices"),
        {
            "customer": {"full_name": "Hemi Walker"},
            "items": [
                {"radiator_id": radiator.pk, "warehouse_id": warehouse.pk, "quantity": 1},
                {"description": "Labour", "quantity": 2, "unit_price": "45.00"},
            ],
        },
        content_type="application/json",
    )

    assert response.status_code == 201
    body = response.json()
    assert body["sub_total"] == "510.00"
    assert body["invoice_number"].startswith("INV")

    detail = staff_client.get(reverse("sales_api:invoice-detail", args=[body["id"]])).json()
    assert [item["is_custom_item"] for item in detail["items"]] == [False, True]
