from django import forms

from accounts.identity import normalize_phone
from menu.models import MenuItem
from organizations.models import Branch
from .audience import PLATFORM_SMS, PLATFORM_TELEGRAM, CampaignFilterSpec
from .models import SmsPhoneList, SmsTemplate

SMS_MAX_LENGTH = 480
MESSAGE_MAX_LENGTH = 2000


class PromoAudienceForm(forms.Form):
    """Audience filters shared by preview and send"""

    platform = forms.ChoiceField(choices=(
        (PLATFORM_SMS, 'SMS'),
        (PLATFORM_TELEGRAM, 'Telegram'),
    ))
    search = forms.CharField(max_length=80, required=False)

    orders_min = forms.IntegerField(min_value=0, required=False)
    orders_max = forms.IntegerField(min_value=0, required=False)
    recency_min_days = forms.IntegerField(min_value=0, required=False)
    recency_max_days = forms.IntegerField(min_value=0, required=False)
    total_spent_min = forms.DecimalField(min_value=0, required=False)
    total_spent_max = forms.DecimalField(min_value=0, required=False)
    avg_order_value_min = forms.DecimalField(min_value=0, required=False)
    avg_order_value_max = forms.DecimalField(min_value=0, required=False)

    branch_ids = forms.ModelMultipleChoiceField(queryset=Branch.objects.all(), required=False)
    include_menu_item_ids = forms.ModelMultipleChoiceField(queryset=MenuItem.objects.all(), required=False)
    exclude_menu_item_ids = forms.ModelMultipleChoiceField(queryset=MenuItem.objects.all(), required=False)

    def to_filter_spec(self):
        return CampaignFilterSpec.from_data(self.cleaned_data)


class SendPromoCampaignForm(PromoAudienceForm):
    message = forms.CharField(max_length=MESSAGE_MAX_LENGTH, widget=forms.Textarea(attrs={'rows': 4}))
    save_template = forms.BooleanField(required=False)
    template_label = forms.CharField(max_length=255, required=False)
    telegram_button_text = forms.CharField(max_length=64, required=False)
    telegram_button_url = forms.URLField(max_length=2048, required=False)

    def clean(self):
        cleaned_data = super().clean()
        platform = cleaned_data.get('platform')
        message = cleaned_data.get('message') or ''

        if platform != PLATFORM_TELEGRAM:
            # Inline buttons only exist on Telegram
            cleaned_data['telegram_button_text'] = ''
            cleaned_data['telegram_button_url'] = ''
            self.errors.pop('telegram_button_text', None)
            self.errors.pop('telegram_button_url', None)
            if len(message) > SMS_MAX_LENGTH:
                self.add_error('message', f'The message may not be greater than {SMS_MAX_LENGTH} characters for SMS.')
            return cleaned_data

        button_text = (cleaned_data.get('telegram_button_text') or '').strip()
        button_url = (cleaned_data.get('telegram_button_url') or '').strip()
        if button_url and not button_text and 'telegram_button_text' not in self.errors:
            self.add_error('telegram_button_text', 'Button text is required when a button URL is given.')
        if button_text and not button_url and 'telegram_button_url' not in self.errors:
            self.add_error('telegram_button_url', 'Button URL is required when button text is given.')

        return cleaned_data

    def campaign_options(self):
        return {
            'save_template': self.cleaned_data.get('save_template', False),
            'template_label': self.cleaned_data.get('template_label') or '',
            'telegram_button_text': self.cleaned_data.get('telegram_button_text') or '',
            'telegram_button_url': self.cleaned_data.get('telegram_button_url') or '',
        }


class SmsTemplateForm(forms.ModelForm):
    body = forms.CharField(max_length=MESSAGE_MAX_LENGTH, widget=forms.Textarea(attrs={'rows': 4}))

    class Meta:
        model = SmsTemplate
        fields = ('label', 'body', 'is_active')


class SmsPhoneListForm(forms.ModelForm):
    class Meta:
        model = SmsPhoneList
        fields = ('phone', 'list_type', 'note')

    def clean_phone(self):
        phone = self.cleaned_data['phone']
        normalized = normalize_phone(phone)
        if not normalized:
            raise forms.ValidationError('Invalid Ethiopian phone format. Use 2519XXXXXXXX or 09XXXXXXXX.')
        self.normalized_phone = normalized
        return phone.strip()

    def save(self, commit=True):
        entry, _ = SmsPhoneList.objects.update_or_create(
            normalized_phone=self.normalized_phone,
            list_type=self.cleaned_data['list_type'],
            defaults={
                'phone': self.cleaned_data['phone'],
                'note': self.cleaned_data.get('note') or None,
            }
        )
        return entry


class ContactImportForm(forms.Form):
    file = forms.FileField(help_text='CSV with name,phone columns')
