import uuid

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from accounts.models import Customer
from menu.models import MenuItem
from organizations.models import Branch


def generate_tracking_token():
    return uuid.uuid4().hex


class Order(models.Model):
    SOURCE_CHOICES = (
        ("web", _("Web")),
        ("telegram", _("Telegram")),
        ("table", _("QR Table")),
    )

    STATUS_CHOICES = (
        ("pending", _("Pending")),  # Order placed, waiting for receipt review
        ("confirmed", _("Confirmed")),  # Receipt approved
        ("preparing", _("Preparing")),
        ("ready", _("Ready")),  # Ready for pickup
        ("completed", _("Completed")),
        ("cancelled", _("Cancelled")),
    )

    RECEIPT_STATUS_CHOICES = (
        ("pending", _("Pending")),
        ("approved", _("Approved")),
        ("disapproved", _("Disapproved")),
    )

    customer = models.ForeignKey(
        Customer,
        on_delete=models.CASCADE,
        related_name="orders",
        verbose_name=_("Customer"),
    )
    # Branch relationship - orders belong to specific pickup locations
    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        related_name="orders",
        verbose_name=_("Branch"),
    )
    source_channel = models.CharField(
        max_length=20,
        choices=SOURCE_CHOICES,
        default="web",
        verbose_name=_("Source Channel"),
    )
    order_status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default="pending",
        verbose_name=_("Status"),
    )
    receipt_status = models.CharField(
        max_length=20,
        choices=RECEIPT_STATUS_CHOICES,
        default="pending",
        verbose_name=_("Receipt Status"),
    )
    pickup_date = models.DateField(null=True, blank=True, verbose_name=_("Pickup Date"))
    tracking_token = models.CharField(
        max_length=64,
        unique=True,
        default=generate_tracking_token,
        editable=False,
        verbose_name=_("Tracking Token"),
    )
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, verbose_name=_("Total Amount")
    )
    disapproval_reason = models.TextField(
        blank=True, null=True, verbose_name=_("Disapproval Reason")
    )
    notify_when_ready = models.BooleanField(default=False, verbose_name=_("Notify When Ready"))
    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_("Created At"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Updated At"))

    class Meta:
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering = ["-created_at"]

    def __str__(self):
        return f"Order {self.id} - {self.customer.name} - {self.total_amount}"


class OrderItem(models.Model):
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
        verbose_name=_("Order"),
    )
    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
        verbose_name=_("Menu Item"),
    )
    quantity = models.PositiveIntegerField(default=1, verbose_name=_("Quantity"))
    unit_price = models.DecimalField(
        max_digits=10, decimal_places=2, default=0, verbose_name=_("Unit Price")
    )

    class Meta:
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")

    def __str__(self):
        return f"{self.display_name} x{self.quantity}"

    @property
    def display_name(self):
        if self.menu_item:
            return self.menu_item.name
        return f"Item #{self.menu_item_id}"

    @property
    def line_total(self):
        return self.unit_price * self.quantity
