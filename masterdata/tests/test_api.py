from django.urls import reverse

from masterdata.models import Customer, Radiator, Warehouse

RADIATOR = {
    "brand": "Mazda",
    "code": "MAZ-BT50-22",
    "name": "BT-50 radiator",
    "year": 2022,
    "retail_price": "610.00",
}


def test_warehouse_crud(staff_client):
    created = staff_client.post(
        reverse("masterdata_api:warehouses"), {"code": "wh_ham", "name": "Hamilton"}, content_type="application/json"
    )
    assert created.status_code == 201
    assert created.json()["code"] == "WH_HAM"

    detail_url = reverse("masterdata_api:warehouse-detail", args=["wh_ham"])
    updated = staff_client.put(detail_url, {"location": "Te Rapa"}, content_type="application/json")
    assert updated.status_code == 200
    assert updated.json()["location"] == "Te Rapa"
    assert updated.json()["name"] == "Hamilton"

    listing = staff_client.get(reverse("masterdata_api:warehouses")).json()["results"]
    assert [w["code"] for w in listing] == ["WH_HAM"]


def test_staff_cannot_delete_catalog(staff_client, warehouse):
    response = staff_client.delete(reverse("masterdata_api:warehouse-detail", args=["WH_AKL"]))

    assert response.status_code == 403
    assert Warehouse.objects.filter(code="WH_AKL").exists()


def test_admin_delete(shop_admin_client, warehouse):
    response = shop_admin_client.delete(reverse("masterdata_api:warehouse-detail", args=["WH_AKL"]))

    assert response.status_code == 204
    assert not Warehouse.objects.exists()


def test_admin_delete_referenced_radiator_is_409(shop_admin_client, stocked):
    radiator, _ = stocked

    response = shop_admin_client.delete(reverse("masterdata_api:radiator-detail", args=[radiator.pk]))

    assert response.status_code == 409
    assert response.json()["code"] == "conflict"
    assert Radiator.objects.filter(pk=radiator.pk).exists()


def test_radiator_create_and_search(staff_client, radiator):
    response = staff_client.post(reverse("masterdata_api:radiators"), RADIATOR, content_type="application/json")
    assert response.status_code == 201
    assert response.json()["retail_price"] == "610.00"

    found = staff_client.get(reverse("masterdata_api:radiators"), {"search": "bt-50"}).json()["results"]
    assert [r["code"] for r in found] == ["MAZ-BT50-22"]


def test_radiator_validation_error(staff_client, db):
    response = staff_client.post(
        reverse("masterdata_api:radiators"), {**RADIATOR, "year": 1800}, content_type="application/json"
    )
    assert response.status_code == 400
    assert response.json()["field"] == "year"


def test_unknown_radiator_is_404(staff_client, db):
    assert staff_client.get(reverse("masterdata_api:radiator-detail", args=[4040])).status_code == 404


def test_customers_hide_inactive_by_default(staff_client, customer):
    Customer.objects.create(first_name="Old", last_name="Account", is_active=False)
    url = reverse("masterdata_api:customers")

    assert [c["full_name"] for c in staff_client.get(url).json()["results"]] == ["Aroha Ngata"]
    assert len(staff_client.get(url, {"include_inactive": "1"}).json()["results"]) == 2
    assert staff_client.get(url, {"search": "aroha@"}).json()["results"][0]["id"] == customer.pk


def test_customer_update(staff_client, customer):
    response = staff_client.put(
        reverse("masterdata_api:customer-detail", args=[customer.pk]),
        {"phone": "021 555 0101"},
        content_type="application/json",
    )
    assert response.status_code == 200
    assert Customer.objects.get(pk=customer.pk).phone == "021 555 0101"
