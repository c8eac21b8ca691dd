from django.contrib import admin
from django.utils.html import format_html
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ["menu_item", "quantity", "unit_price", "line_total"]
    readonly_fields = ["line_total"]
    raw_id_fields = ["menu_item"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "customer",
        "branch",
        "source_channel",
        "total_amount",
        "status_display",
        "receipt_status",
        "created_at",
    )
    list_filter = (
        "order_status",
        "receipt_status",
        "source_channel",
        "branch",
        "created_at",
    )
    search_fields = (
        "customer__name",
        "customer__phone",
        "customer__telegram_username",
        "tracking_token",
    )
    ordering = ("-created_at",)
    list_select_related = ("customer", "branch")
    raw_id_fields = ("customer",)
    readonly_fields = ("tracking_token", "updated_at")
    inlines = [OrderItemInline]

    def status_display(self, obj):
        """Display status with color coding"""
        colors = {
            "pending": "orange",
            "confirmed": "blue",
            "preparing": "teal",
            "ready": "darkgreen",
            "completed": "gray",
            "cancelled": "red",
        }
        color = colors.get(obj.order_status, "black")
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.get_order_status_display(),
        )

    status_display.short_description = "Status"
