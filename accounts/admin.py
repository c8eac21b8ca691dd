from django.contrib import admin
from accounts.models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "display_phone",
        "telegram_username",
        "telegram_id",
        "order_count",
        "created_at",
    )
    search_fields = ("name", "phone", "telegram_username", "telegram_id")
    ordering = ("-created_at",)
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (
            "Contact",
            {
                "fields": (
                    "name",
                    "phone",
                )
            },
        ),
        (
            "Telegram",
            {
                "fields": (
                    "telegram_id",
                    "telegram_username",
                )
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def order_count(self, obj):
        return obj.orders.count()

    order_count.short_description = "Orders"
