from django.contrib import admin
from .models import Branch, Role, AdminUser


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'address', 'phone']
    ordering = ['name']


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'display_name', 'is_active',
                    'can_manage_marketing', 'can_send_campaigns',
                    'can_manage_templates', 'can_view_customers']
    list_filter = ['is_active']
    search_fields = ['name', 'display_name']
    fieldsets = (
        (None, {
            'fields': ('name', 'display_name', 'description', 'is_active')
        }),
        ('Marketing', {
            'fields': (
                'can_manage_marketing',
                'can_send_campaigns',
                'can_manage_templates',
                'can_view_customers',
            ),
        }),
    )


@admin.register(AdminUser)
class AdminUserAdmin(admin.ModelAdmin):
    list_display = ['user', 'role', 'branch_list', 'is_active', 'created_at']
    list_filter = ['role', 'is_active', 'branches']
    search_fields = ['user__username', 'user__first_name', 'user__last_name', 'phone']
    filter_horizontal = ['branches']
    raw_id_fields = ['user']

    def branch_list(self, obj):
        return ", ".join(branch.name for branch in obj.branches.all()) or "-"
    branch_list.short_description = 'Branches'
