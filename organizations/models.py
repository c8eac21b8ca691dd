from django.db import models
from django.contrib.auth.models import User
from django.utils.translation import gettext_lazy as _


class Branch(models.Model):
    """Pickup location (cafe branch) where orders are collected"""

    name = models.CharField(_("Name"), max_length=200)
    address = models.TextField(_("Address"), blank=True, null=True)
    phone = models.CharField(_("Phone"), max_length=20, blank=True, null=True)
    google_maps_url = models.URLField(
        _("Google Maps URL"),
        blank=True,
        null=True,
        help_text=_("Link shown to customers for directions"),
    )
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(_("Created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    class Meta:
        verbose_name = _("Branch")
        verbose_name_plural = _("Branches")
        ordering = ["name"]

    def __str__(self):
        return self.name


class Role(models.Model):
    """Staff roles with marketing-related permissions"""

    # System role identifiers (used for special logic)
    ADMIN = "admin"
    BRANCH_MANAGER = "branch_manager"
    CASHIER = "cashier"
    STAFF = "staff"

    SYSTEM_ROLES = [ADMIN, BRANCH_MANAGER, CASHIER, STAFF]

    name = models.CharField(_("Name"), max_length=50, unique=True)
    display_name = models.CharField(_("Display Name"), max_length=100, blank=True)
    description = models.TextField(_("Description"), blank=True, null=True)
    is_active = models.BooleanField(_("Active"), default=True)

    can_manage_marketing = models.BooleanField(_("Can manage marketing (full access)"), default=False,
        help_text=_("Full marketing access - overrides other marketing permissions"))
    can_send_campaigns = models.BooleanField(_("Can send promo campaigns"), default=False,
        help_text=_("Can preview audiences and send SMS/Telegram promos"))
    can_manage_templates = models.BooleanField(_("Can manage SMS templates"), default=False,
        help_text=_("Can edit SMS templates and phone lists"))
    can_view_customers = models.BooleanField(_("Can view customers"), default=False,
        help_text=_("Can view customer records and import contacts"))

    created_at = models.DateTimeField(_("Created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    # Master permission -> permissions it grants
    MASTER_PERMISSION_MAP = {
        "can_send_campaigns": ["can_manage_marketing"],
        "can_manage_templates": ["can_manage_marketing"],
        "can_view_customers": ["can_manage_marketing"],
    }

    class Meta:
        verbose_name = _("Role")
        verbose_name_plural = _("Roles")
        ordering = ["name"]

    def __str__(self):
        return self.display_name or self.name.replace("_", " ").title()

    @property
    def is_admin_role(self):
        return self.name == self.ADMIN

    def has_effective_permission(self, permission):
        """Check a permission directly or through its master permission"""
        if getattr(self, permission, False):
            return True

        for master_perm in self.MASTER_PERMISSION_MAP.get(permission, []):
            if getattr(self, master_perm, False):
                return True

        return False


class AdminUser(models.Model):
    """Staff profile with role and branch assignments"""

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="admin_profile",
        verbose_name=_("User"),
    )
    role = models.ForeignKey(
        Role, on_delete=models.PROTECT, related_name="users", verbose_name=_("Role"),
        null=True, blank=True,
        help_text=_("Role is optional for superusers"),
    )
    branches = models.ManyToManyField(
        Branch,
        blank=True,
        related_name="staff",
        verbose_name=_("Branches"),
        help_text=_("Branches this staff member can see data for"),
    )
    phone = models.CharField(_("Phone"), max_length=20, blank=True, null=True)
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(_("Created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    class Meta:
        verbose_name = _("Admin User")
        verbose_name_plural = _("Admin Users")
        ordering = ["user__username"]

    def __str__(self):
        role_name = self.role.name if self.role else "Superuser"
        return f"{self.user.get_full_name() or self.user.username} ({role_name})"

    @property
    def is_admin(self):
        return bool(self.role and self.role.is_admin_role)

    def has_permission(self, permission):
        if not self.role:
            return False
        return self.role.has_effective_permission(permission)

    def get_accessible_branch_ids(self):
        """Ids of active branches assigned to this staff member"""
        return list(
            self.branches.filter(is_active=True).order_by("pk").values_list("pk", flat=True)
        )
