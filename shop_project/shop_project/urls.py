from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    # JSON endpoints for the billing counter
    path("api/", include("billing_core.urls")),
]
