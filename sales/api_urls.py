from django.urls import path

from . import api_views

app_name = "sales_api"

urlpatterns = [
    path("sales/", api_views.api_sales, name="sales"),
    path("sales/<int:sale_id>/", api_views.api_sale_detail, name="sale-detail"),
    path("sales/<int:sale_id>/receipt/", api_views.api_sale_receipt, name="sale-receipt"),
    path("sales/<int:sale_id>/cancel/", api_views.api_cancel_sale, name="sale-cancel"),
    path("sales/<int:sale_id>/refund/", api_views.api_refund_sale, name="sale-refund"),
    path("invoices/", api_views.api_create_invoice, name="invoices"),
    path("invoices/<int:invoice_id>/", api_views.api_invoice_detail, name="invoice-detail"),
]
