from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from inventory.models import StockLevel
from inventory.services.ledger import adjust_stock
from masterdata.models import Customer, Radiator, Warehouse


WAREHOUSES = [
    ("WH_AKL", "Auckland", "Auckland"),
    ("WH_WLG", "Wellington", "Wellington"),
    ("WH_CHC", "Christchurch", "Christchurch"),
]

RADIATORS = [
    # brand, code, name, year, retail, trade, cost, product type
    ("Toyota", "TOY-COR-18", "Corolla 1.8 radiator", 2018, "420.00", "360.00", "250.00", "Vehicle"),
    ("Toyota", "TOY-HIL-30", "Hilux 3.0 D4D radiator", 2016, "690.00", "590.00", "410.00", "Truck"),
    ("Nissan", "NIS-NAV-25", "Navara D40 radiator", 2012, "560.00", "480.00", "330.00", "Truck"),
    ("Mazda", "MAZ-3-20", "Mazda3 2.0 radiator", 2019, "450.00", "385.00", "270.00", "Vehicle"),
    ("Caterpillar", "CAT-320D", "320D excavator core", 2010, "2450.00", "2150.00", "1600.00", "Machinery"),
]

CUSTOMERS = [
    ("Aroha", "Ngata", "aroha@example.co.nz", "021 555 0101", ""),
    ("Liam", "Walker", "liam@walkerauto.co.nz", "027 555 0144", "Walker Auto"),
    ("Mei", "Chen", "mei.chen@example.co.nz", "022 555 0190", ""),
]

# Initial quantity per radiator, per warehouse (in WAREHOUSES order).
INITIAL_STOCK = {
    "TOY-COR-18": (12, 4, 0),
    "TOY-HIL-30": (6, 2, 3),
    "NIS-NAV-25": (3, 0, 5),
    "MAZ-3-20": (9, 7, 1),
    "CAT-320D": (1, 0, 0),
}


class Command(BaseCommand):
    help = "Create demo warehouses, radiators, customers and initial stock"

    def add_arguments(self, parser):
        parser.add_argument("--no-stock", action="store_true", help="Only create master data")

    @transaction.atomic
    def handle(self, *args, **options):
        warehouses = []
        for code, name, location in WAREHOUSES:
            warehouse, _ = Warehouse.objects.get_or_create(code=code, defaults={"name": name, "location": location})
            warehouses.append(warehouse)

        for brand, code, name, year, retail, trade, cost, product_type in RADIATORS:
            Radiator.objects.get_or_create(
                code=code,
                defaults={
                    "brand": brand,
                    "name": name,
                    "year": year,
                    "retail_price": Decimal(retail),
                    "trade_price": Decimal(trade),
                    "cost_price": Decimal(cost),
                    "product_type": product_type,
                },
            )

        for first_name, last_name, email, phone, company in CUSTOMERS:
            Customer.objects.get_or_create(
                email=email,
                defaults={"first_name": first_name, "last_name": last_name, "phone": phone, "company": company},
            )

        created = 0
        if not options["no_stock"]:
            for code, quantities in INITIAL_STOCK.items():
                radiator = Radiator.objects.get(code=code)
                for warehouse, quantity in zip(warehouses, quantities):
                    # Never overwrite stock that already exists.
                    if StockLevel.objects.filter(radiator=radiator, warehouse=warehouse).exists():
                        continue
                    adjust_stock(radiator.pk, warehouse.code, quantity, reason="Initial stock")
                    created += 1

        self.stdout.write(self.style.SUCCESS(f"Seeded radiator data ({created} stock levels created)"))
