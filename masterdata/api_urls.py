from django.urls import path

from . import api_views

app_name = "masterdata_api"

urlpatterns = [
    path("warehouses/", api_views.api_warehouses, name="warehouses"),
    path("warehouses/<str:code>/", api_views.api_warehouse_detail, name="warehouse-detail"),
    path("radiators/", api_views.api_radiators, name="radiators"),
    path("radiators/<int:radiator_id>/", api_views.api_radiator_detail, name="radiator-detail"),
    path("customers/", api_views.api_customers, name="customers"),
    path("customers/<int:customer_id>/", api_views.api_customer_detail, name="customer-detail"),
]
