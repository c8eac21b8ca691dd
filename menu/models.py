from django.db import models
from django.utils.translation import gettext_lazy as _


class MenuItem(models.Model):
    """Item on the cafe menu"""

    name = models.CharField(_("Name"), max_length=150)
    category = models.CharField(_("Category"), max_length=100, blank=True, default="")
    description = models.TextField(_("Description"), blank=True, null=True)
    price = models.DecimalField(_("Price"), max_digits=10, decimal_places=2, default=0)
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(_("Created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    class Meta:
        verbose_name = _("Menu Item")
        verbose_name_plural = _("Menu Items")
        ordering = ["category", "name"]

    def __str__(self):
        return self.name
