from django.db import models
from django.utils.translation import gettext_lazy as _

from accounts.identity import display_phone, is_synthetic_phone


class Customer(models.Model):
    """Customer identity shared by web, Telegram and QR-table orders"""

    name = models.CharField(max_length=150, verbose_name=_("Full Name"))
    phone = models.CharField(
        max_length=32,
        unique=True,
        verbose_name=_("Phone Number"),
        help_text=_("Canonical +251 phone, or a q-prefixed placeholder for table walk-ins"),
    )
    telegram_id = models.BigIntegerField(
        verbose_name=_("Telegram User ID"), blank=True, null=True
    )
    telegram_username = models.CharField(
        max_length=100, blank=True, null=True, verbose_name=_("Telegram Username")
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Created At"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Updated At"))

    class Meta:
        verbose_name = _("Customer")
        verbose_name_plural = _("Customers")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.display_phone or self.telegram_username or self.pk})"

    @property
    def has_synthetic_phone(self):
        """QR-table sessions get a generated placeholder instead of a real phone"""
        return is_synthetic_phone(self.phone)

    @property
    def display_phone(self):
        return display_phone(self.phone)
