from decimal import Decimal

import pytest

from core.models import Role, UserProfile
from inventory.services.ledger import adjust_stock
from masterdata.models import Customer, Radiator, Warehouse


@pytest.fixture
def warehouse(db):
    return Warehouse.objects.create(code="WH_AKL", name="Auckland", location="Auckland")


@pytest.fixture
def other_warehouse(db):
    return Warehouse.objects.create(code="WH_WLG", name="Wellington", location="Wellington")


@pytest.fixture
def radiator(db):
    return Radiator.objects.create(
        brand="Toyota",
        code="TOY-COR-18",
        name="Corolla 1.8 radiator",
        year=2018,
        retail_price=Decimal("420.00"),
        trade_price=Decimal("360.00"),
    )


@pytest.fixture
def other_radiator(db):
    return Radiator.objects.create(
        brand="Nissan",
        code="NIS-NAV-25",
        name="Navara D40 radiator",
        year=2012,
        retail_price=Decimal("560.00"),
    )


@pytest.fixture
def customer(db):
    return Customer.objects.create(first_name="Aroha", last_name="Ngata", email="aroha@example.co.nz")


@pytest.fixture
def make_user(db, django_user_model):
    def _make(username, role=Role.STAFF, **extra):
        user = django_user_model.objects.create_user(username=username, password="secret", **extra)
        UserProfile.objects.create(user=user, role=role)
        return user

    return _make


@pytest.fixture
def staff_user(make_user):
    return make_user("staff")


@pytest.fixture
def shop_admin(make_user):
    return make_user("manager", role=Role.ADMIN)


@pytest.fixture
def staff_client(client, staff_user):
    client.force_login(staff_user)
    return client


@pytest.fixture
def shop_admin_client(client, shop_admin):
    client.force_login(shop_admin)
    return client


@pytest.fixture
def stocked(radiator, warehouse):
    """10 units of `radiator` in WH_AKL."""
    adjust_stock(radiator.pk, warehouse.code, 10, reason="Initial stock")
    return radiator, warehouse
