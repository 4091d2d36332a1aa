from django.urls import path

from . import views

urlpatterns = [
    path("bills/", views.bills_view, name="bills"),
    path("bills/counter/", views.reset_counter_view, name="bill-counter"),
    path("bills/<int:pk>/", views.bill_detail_view, name="bill-detail"),
]
