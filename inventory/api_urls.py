from django.urls import path

from . import api_views

app_name = "inventory_api"

urlpatterns = [
    path("stock/summary/", api_views.api_stock_summary, name="summary"),
    path("stock/status/", api_views.api_stock_status, name="status"),
    path("stock/low/", api_views.api_low_stock, name="low"),
    path("stock/out/", api_views.api_out_of_stock, name="out"),
    path("stock/bulk/", api_views.api_bulk_adjust_stock, name="bulk-adjust"),
    path("stock/movements/", api_views.api_stock_movements, name="movements"),
    path("stock/radiators/", api_views.api_radiators_with_stock, name="radiators"),
    path("stock/warehouse/<str:code>/", api_views.api_warehouse_stock, name="warehouse"),
    path("stock/<int:radiator_id>/", api_views.api_radiator_stock, name="radiator"),
    path("stock/<int:radiator_id>/adjust/", api_views.api_adjust_stock, name="adjust"),
]
