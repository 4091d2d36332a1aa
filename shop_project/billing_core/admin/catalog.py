from django.contrib import admin

from billing_core.models import Customer, SparePart


# Register `SparePart` model
@admin.register(SparePart)
class SparePartAdmin(admin.ModelAdmin):
    list_display = (
        "id", "category", "device_model", "brand",
        "box_number", "quantity", "price", "stock_status",
    )
    search_fields = ("category", "box_number", "description")
    list_filter = ("category",)

    # Derived from quantity, never stored
    @admin.display(description="Status")
    def stock_status(self, obj):
        return obj.status


# Register `Customer` model
@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "phone", "created_at")
    search_fields = ("name", "phone")
