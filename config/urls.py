from django.contrib import admin
from django.urls import include, path

admin.autodiscover()

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("masterdata.api_urls")),
    path("api/", include("inventory.api_urls")),
    path("api/", include("sales.api_urls")),
]
