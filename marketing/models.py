"""
Marketing Models for SMS / Telegram Promotions

Stored message templates, the SMS gateway delivery log and the SMS
white/blacklist.
"""
from django.db import models
from django.utils.translation import gettext_lazy as _


class SmsTemplate(models.Model):
    """
    Reusable message body with {placeholder} tokens.
    Created from configured defaults, by staff, or by "save as template"
    when sending a promo campaign.
    """

    key = models.CharField(
        _('Key'),
        max_length=100,
        unique=True,
        help_text=_('Stable identifier, e.g. order_ready or promo_20260101_120000')
    )
    label = models.CharField(_('Label'), max_length=255)
    body = models.TextField(
        _('Body'),
        help_text=_('Message text with placeholders such as {name} or {orderid}')
    )
    is_active = models.BooleanField(_('Active'), default=True)
    created_at = models.DateTimeField(_('Created At'), auto_now_add=True)
    updated_at = models.DateTimeField(_('Updated At'), auto_now=True)

    class Meta:
        verbose_name = _('SMS Template')
        verbose_name_plural = _('SMS Templates')
        ordering = ['key']

    def __str__(self):
        return f"{self.label} ({self.key})"


class SmsLog(models.Model):
    """One row per SMS gateway attempt"""

    STATUS_PENDING = 'pending'
    STATUS_SENT = 'sent'
    STATUS_FAILED = 'failed'

    STATUS_CHOICES = [
        (STATUS_PENDING, _('Pending')),
        (STATUS_SENT, _('Sent')),
        (STATUS_FAILED, _('Failed')),
    ]

    customer = models.ForeignKey(
        'accounts.Customer',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sms_logs',
        verbose_name=_('Customer')
    )
    phone = models.CharField(_('Phone'), max_length=32)
    message = models.TextField(_('Message'))
    status = models.CharField(
        _('Status'),
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )
    provider_response = models.TextField(_('Provider Response'), blank=True, null=True)
    sent_at = models.DateTimeField(_('Sent At'), null=True, blank=True)
    created_at = models.DateTimeField(_('Created At'), auto_now_add=True)
    updated_at = models.DateTimeField(_('Updated At'), auto_now=True)

    class Meta:
        verbose_name = _('SMS Log')
        verbose_name_plural = _('SMS Logs')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='smslog_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.phone} ({self.get_status_display()})"


class SmsPhoneList(models.Model):
    """
    SMS whitelist / blacklist entry.
    While any whitelist entry exists, only whitelisted numbers receive SMS.
    """

    LIST_WHITELIST = 'whitelist'
    LIST_BLACKLIST = 'blacklist'

    LIST_TYPE_CHOICES = [
        (LIST_WHITELIST, _('Whitelist')),
        (LIST_BLACKLIST, _('Blacklist')),
    ]

    phone = models.CharField(_('Phone'), max_length=32)
    normalized_phone = models.CharField(
        _('Normalized Phone'),
        max_length=9,
        help_text=_('9-digit national number used for matching')
    )
    list_type = models.CharField(
        _('List Type'),
        max_length=20,
        choices=LIST_TYPE_CHOICES
    )
    note = models.CharField(_('Note'), max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(_('Created At'), auto_now_add=True)
    updated_at = models.DateTimeField(_('Updated At'), auto_now=True)

    class Meta:
        verbose_name = _('SMS Phone List Entry')
        verbose_name_plural = _('SMS Phone List')
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['normalized_phone', 'list_type'],
                name='unique_phone_per_list'
            )
        ]

    def __str__(self):
        return f"{self.phone} ({self.get_list_type_display()})"
