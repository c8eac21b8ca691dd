from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _
from .models import SmsTemplate, SmsLog, SmsPhoneList


@admin.register(SmsTemplate)
class SmsTemplateAdmin(admin.ModelAdmin):
    list_display = ['key', 'label', 'is_active', 'updated_at']
    list_filter = ['is_active']
    search_fields = ['key', 'label', 'body']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(SmsLog)
class SmsLogAdmin(admin.ModelAdmin):
    list_display = ['phone', 'customer', 'status_badge', 'sent_at', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['phone', 'message', 'customer__name']
    raw_id_fields = ['customer']
    readonly_fields = [
        'customer', 'phone', 'message', 'status', 'provider_response',
        'sent_at', 'created_at', 'updated_at'
    ]

    fieldsets = (
        (_('Message'), {
            'fields': ('customer', 'phone', 'message')
        }),
        (_('Delivery'), {
            'fields': ('status', 'sent_at', 'provider_response'),
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def status_badge(self, obj):
        colors = {
            SmsLog.STATUS_SENT: 'green',
            SmsLog.STATUS_FAILED: 'red',
            SmsLog.STATUS_PENDING: 'gray',
        }
        return format_html(
            '<span style="color: {};">{}</span>',
            colors.get(obj.status, 'gray'),
            obj.get_status_display()
        )
    status_badge.short_description = _('Status')

    def has_add_permission(self, request):
        return False


@admin.register(SmsPhoneList)
class SmsPhoneListAdmin(admin.ModelAdmin):
    list_display = ['phone', 'normalized_phone', 'list_type', 'note', 'created_at']
    list_filter = ['list_type']
    search_fields = ['phone', 'normalized_phone', 'note']
    readonly_fields = ['normalized_phone', 'created_at', 'updated_at']

    def save_model(self, request, obj, form, change):
        from accounts.identity import normalize_phone
        obj.normalized_phone = normalize_phone(obj.phone) or ''
        super().save_model(request, obj, form, change)
