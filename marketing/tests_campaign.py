"""
Tests for promo campaign dispatch

Covers:
- CampaignDispatcher (SMS / Telegram sends, per-recipient failures, saved templates)
- SMS Ethiopia gateway client
- Marketing views
- Management commands
"""
import json
import os
import tempfile
from decimal import Decimal
from io import StringIO
from unittest.mock import Mock, patch

import requests
from django.contrib.messages import get_messages
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from django.urls import reverse

from accounts.models import Customer
from menu.models import MenuItem
from marketing.audience import AudienceRangeError, CampaignFilterSpec
from marketing.broadcast_service import (
    CAMPAIGN_SOURCE, NO_MATCH_MESSAGE, CampaignDispatcher, CampaignError, CampaignResult,
)
from marketing.models import SmsLog, SmsPhoneList, SmsTemplate
from marketing.sms_gateway import SmsEthiopiaClient
from marketing.tests import NOW, PromoFixtureMixin
from organizations.models import Role

SMS_ENABLED = {
    'enabled': True,
    'base_url': 'https://sms.example.et/',
    'key': 'test-key',
    'timeout': 5,
}
SMS_DISABLED = dict(SMS_ENABLED, enabled=False)


def sms_log(status):
    return Mock(status=status)


class CampaignDispatcherTest(PromoFixtureMixin, TestCase):
    """Campaign sends with mocked SMS and Telegram clients"""

    def setUp(self):
        self.bole = self.create_branch('Bole')
        self.piassa = self.create_branch('Piassa')
        self.latte = MenuItem.objects.create(name='Latte', price=Decimal('60.00'))
        self.admin = self.create_staff('root', superuser=True)
        self.manager = self.create_staff('bole_manager', branches=[self.bole])

        self.sara = self.create_customer('Sara', '+251911000111', telegram_id=1001)
        self.abel = self.create_customer('Abel', '+251922000222', telegram_id=-5)
        self.walk_in = self.create_customer('Table 4', 'q0123456789abcdef012', telegram_id=1003)

        self.create_order(self.sara, self.bole, 120, days_ago=3, items=[(self.latte, 2)])
        self.create_order(self.sara, self.bole, 80, days_ago=2, items=[(self.latte, 1)])
        self.create_order(self.abel, self.bole, 60, days_ago=4)
        self.create_order(self.walk_in, self.piassa, 40, days_ago=1)

        self.sms_client = Mock()
        self.sms_client.send.return_value = sms_log(SmsLog.STATUS_SENT)
        self.telegram_client = Mock()
        self.dispatcher = CampaignDispatcher(
            sms_client=self.sms_client,
            telegram_client=self.telegram_client,
            clock=lambda: NOW,
        )

    def test_sms_campaign_renders_per_customer(self):
        result = self.dispatcher.send_campaign(
            self.manager, CampaignFilterSpec(platform='sms'), 'Hi {name}, last order {total}'
        )

        self.assertEqual((result.sent, result.failed, result.audience_size), (2, 0, 2))
        calls = self.sms_client.send.call_args_list
        self.assertEqual(calls[0].args, ('+251911000111', 'Hi Sara, last order 80.00', self.sara))
        self.assertEqual(calls[1].args, ('+251922000222', 'Hi Abel, last order 60.00', self.abel))
        self.telegram_client.send_message.assert_not_called()

    def test_sms_failures_are_counted(self):
        self.sms_client.send.side_effect = [
            sms_log(SmsLog.STATUS_FAILED),
            sms_log(SmsLog.STATUS_SENT),
        ]

        result = self.dispatcher.send_campaign(self.manager, CampaignFilterSpec(), 'Hello')

        self.assertEqual((result.sent, result.failed), (1, 1))
        self.assertEqual(result.summary_message(), 'SMS promo sent. Sent: 1, Failed: 1, Audience: 2.')

    def test_customer_without_phone_fails_sms_without_send(self):
        result = self.dispatcher.send_campaign(
            self.admin, CampaignFilterSpec(search='Table'), 'Hello {name}'
        )

        self.assertEqual((result.sent, result.failed, result.audience_size), (0, 1, 1))
        self.sms_client.send.assert_not_called()

    def test_telegram_campaign(self):
        result = self.dispatcher.send_campaign(
            self.admin, CampaignFilterSpec(platform='telegram'), 'Hi {name}, try {recent_item}'
        )

        # Abel's Telegram id is not a valid chat id
        self.assertEqual((result.sent, result.failed, result.audience_size), (2, 1, 3))
        self.assertEqual(self.telegram_client.send_message.call_count, 2)
        self.sms_client.send.assert_not_called()

        chat_id, text, options, context = self.telegram_client.send_message.call_args_list[0].args
        self.assertEqual(chat_id, 1001)
        self.assertEqual(text, 'Hi Sara, try Latte')
        self.assertEqual(options, {})
        self.assertEqual(context, {
            'source': CAMPAIGN_SOURCE,
            'customer_id': self.sara.pk,
            'customer_name': 'Sara',
            'customer_telegram_id': '1001',
        })

    def test_telegram_button_requires_text_and_url(self):
        spec = CampaignFilterSpec(platform='telegram', search='Sara')

        self.dispatcher.send_campaign(self.admin, spec, 'Hi', {
            'telegram_button_text': 'Order now', 'telegram_button_url': 'https://cafe.example/menu',
        })
        options = self.telegram_client.send_message.call_args.args[2]
        self.assertEqual(options, {'button': {'text': 'Order now', 'url': 'https://cafe.example/menu'}})

        self.dispatcher.send_campaign(self.admin, spec, 'Hi', {
            'telegram_button_text': 'Order now', 'telegram_button_url': '  ',
        })
        self.assertEqual(self.telegram_client.send_message.call_args.args[2], {})

    def test_empty_audience_sends_nothing(self):
        result = self.dispatcher.send_campaign(
            self.admin, CampaignFilterSpec(search='nobody'), 'Hello', {'save_template': True}
        )

        self.assertFalse(result.matched)
        self.assertEqual(result.summary_message(), NO_MATCH_MESSAGE)
        self.sms_client.send.assert_not_called()
        self.assertFalse(SmsTemplate.objects.filter(key__startswith='promo_2026').exists())

    def test_invalid_range_sends_nothing(self):
        spec = CampaignFilterSpec(orders_min=3, orders_max=1)
        with self.assertRaises(AudienceRangeError):
            self.dispatcher.send_campaign(self.admin, spec, 'Hello')
        self.sms_client.send.assert_not_called()

    def test_invalid_platform_and_message(self):
        with self.assertRaises(CampaignError):
            self.dispatcher.send_campaign(self.admin, CampaignFilterSpec(platform='fax'), 'Hello')
        with self.assertRaises(CampaignError):
            self.dispatcher.send_campaign(self.admin, CampaignFilterSpec(), '   ')

    def test_manager_context_uses_scoped_orders(self):
        self.create_order(self.sara, self.piassa, 999, days_ago=1)

        self.dispatcher.send_campaign(self.manager, CampaignFilterSpec(search='Sara'), '{branch} {total}')
        self.assertEqual(self.sms_client.send.call_args.args[1], 'Bole 80.00')

        self.dispatcher.send_campaign(self.admin, CampaignFilterSpec(search='Sara'), '{branch} {total}')
        self.assertEqual(self.sms_client.send.call_args.args[1], 'Piassa 999.00')

    def test_save_template_after_send(self):
        result = self.dispatcher.send_campaign(
            self.manager, CampaignFilterSpec(), 'Hi {name}', {'save_template': True}
        )

        template = SmsTemplate.objects.get(key='promo_20260310_150000')
        self.assertEqual(template.label, 'Promo Campaign 2026-03-10 15:00')
        self.assertEqual(template.body, 'Hi {name}')
        self.assertTrue(template.is_active)
        self.assertEqual(result.saved_template_label, template.label)
        self.assertTrue(result.summary_message().endswith(
            'Template saved as "Promo Campaign 2026-03-10 15:00".'
        ))

    def test_saved_template_key_gets_suffix_on_collision(self):
        SmsTemplate.objects.create(key='promo_20260310_150000', label='Earlier', body='x')
        SmsTemplate.objects.create(key='promo_20260310_150000_1', label='Earlier', body='y')

        template = self.dispatcher.save_template('Body', '  Weekend promo ')

        self.assertEqual(template.key, 'promo_20260310_150000_2')
        self.assertEqual(template.label, 'Weekend promo')

    def test_vanished_customer_counts_as_failed(self):
        with patch.object(Customer.objects, 'in_bulk', return_value={}):
            result = self.dispatcher.send_campaign(self.manager, CampaignFilterSpec(), 'Hello')

        self.assertEqual((result.sent, result.failed, result.audience_size), (0, 2, 2))
        self.sms_client.send.assert_not_called()


class CampaignResultTest(TestCase):

    def test_summary_message_for_telegram(self):
        result = CampaignResult(platform='telegram', sent=3, failed=1, audience_size=4)
        self.assertEqual(result.summary_message(), 'Telegram promo sent. Sent: 3, Failed: 1, Audience: 4.')


class SmsEthiopiaClientTest(PromoFixtureMixin, TestCase):
    """Gateway validation, phone lists and provider responses"""

    def setUp(self):
        self.customer = self.create_customer('Sara', '+251911000111')
        self.client_enabled = SmsEthiopiaClient(SMS_ENABLED)

    @patch('marketing.sms_gateway.requests.post')
    def test_successful_send(self, mock_post):
        mock_post.return_value = Mock(ok=True, status_code=200, text='{"status":"queued"}')

        log = self.client_enabled.send('0911000111', 'Hello', self.customer)

        self.assertEqual(log.status, SmsLog.STATUS_SENT)
        self.assertIsNotNone(log.sent_at)
        self.assertEqual(log.provider_response, '{"status":"queued"}')
        self.assertEqual(log.customer, self.customer)
        mock_post.assert_called_once_with(
            'https://sms.example.et/api/sms/send',
            json={'msisdn': '251911000111', 'text': 'Hello'},
            headers={'KEY': 'test-key', 'Content-Type': 'application/json', 'Accept': 'application/json'},
            timeout=5,
        )

    @patch('marketing.sms_gateway.requests.post')
    def test_invalid_phone_is_logged_as_failed(self, mock_post):
        log = self.client_enabled.send('12345', 'Hello')

        self.assertEqual(log.status, SmsLog.STATUS_FAILED)
        self.assertIn('Invalid Ethiopian phone format', log.provider_response)
        mock_post.assert_not_called()

    @patch('marketing.sms_gateway.requests.post')
    def test_blacklist_and_whitelist(self, mock_post):
        SmsPhoneList.objects.create(
            phone='0911000111', normalized_phone='911000111', list_type=SmsPhoneList.LIST_BLACKLIST
        )
        log = self.client_enabled.send('+251911000111', 'Hello')
        self.assertEqual(log.provider_response, 'Phone is blacklisted for SMS.')

        SmsPhoneList.objects.create(
            phone='0922000222', normalized_phone='922000222', list_type=SmsPhoneList.LIST_WHITELIST
        )
        log = self.client_enabled.send('0933000333', 'Hello')
        self.assertEqual(log.provider_response, 'Phone not in whitelist while whitelist mode is active.')

        mock_post.return_value = Mock(ok=True, status_code=200, text='ok')
        log = self.client_enabled.send('0922000222', 'Hello')
        self.assertEqual(log.status, SmsLog.STATUS_SENT)
        self.assertEqual(mock_post.call_count, 1)

    @override_settings(SMS_ETHIOPIA=SMS_DISABLED)
    @patch('marketing.sms_gateway.requests.post')
    def test_disabled_provider(self, mock_post):
        log = SmsEthiopiaClient().send('0911000111', 'Hello')

        self.assertEqual(log.status, SmsLog.STATUS_FAILED)
        self.assertEqual(log.provider_response, 'SMS provider disabled in environment.')
        mock_post.assert_not_called()

    @patch('marketing.sms_gateway.requests.post')
    def test_missing_api_key(self, mock_post):
        log = SmsEthiopiaClient(dict(SMS_ENABLED, key='')).send('0911000111', 'Hello')

        self.assertEqual(log.provider_response, 'Missing SMS_ETHIOPIA_API_KEY.')
        mock_post.assert_not_called()

    @patch('marketing.sms_gateway.requests.post')
    def test_provider_error_response(self, mock_post):
        mock_post.return_value = Mock(ok=False, status_code=401, text='Unauthorized')

        log = self.client_enabled.send('0911000111', 'Hello')

        self.assertEqual(log.status, SmsLog.STATUS_FAILED)
        self.assertEqual(log.provider_response, 'Unauthorized')
        self.assertIsNone(log.sent_at)

    @patch('marketing.sms_gateway.requests.post')
    def test_transport_error_does_not_raise(self, mock_post):
        mock_post.side_effect = requests.ConnectionError('connection refused')

        log = self.client_enabled.send('0911000111', 'Hello')

        self.assertEqual(log.status, SmsLog.STATUS_FAILED)
        self.assertIn('connection refused', log.provider_response)


@override_settings(SMS_ETHIOPIA=SMS_DISABLED)
class MarketingViewsTest(PromoFixtureMixin, TestCase):
    """Dashboard endpoints"""

    def setUp(self):
        self.bole = self.create_branch('Bole')
        self.admin = self.create_staff('root', superuser=True)
        self.manager = self.create_staff('bole_manager', branches=[self.bole])
        self.cashier = self.create_staff('cashier', role_name=Role.CASHIER, branches=[self.bole])
        Role.objects.filter(name=Role.CASHIER).update(
            can_send_campaigns=False, can_manage_templates=False, can_view_customers=False
        )

        self.sara = self.create_customer('Sara', '+251911000111')
        self.create_order(self.sara, self.bole, 150, days_ago=2)

    def flashed(self, response):
        return [str(message) for message in get_messages(response.wsgi_request)]

    def test_preview_returns_summary(self):
        self.client.force_login(self.manager)
        response = self.client.get(reverse('promo_campaign_preview'), {'platform': 'sms'})

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload['summary']['matched_customers'], 1)
        self.assertEqual(payload['sample'][0]['name'], 'Sara')

    def test_preview_rejects_inverted_range(self):
        self.client.force_login(self.admin)
        response = self.client.post(reverse('promo_campaign_preview'), {
            'platform': 'sms', 'total_spent_min': '500', 'total_spent_max': '100',
        })

        self.assertEqual(response.status_code, 422)
        self.assertEqual(
            response.json()['message'],
            'Total spend range is invalid. Min spend cannot be greater than max spend.'
        )

    def test_preview_rejects_invalid_input(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('promo_campaign_preview'), {
            'platform': 'email', 'orders_min': '-1',
        })

        self.assertEqual(response.status_code, 422)
        self.assertIn('platform', response.json()['errors'])
        self.assertIn('orders_min', response.json()['errors'])

    def test_preview_requires_permission(self):
        self.client.force_login(self.cashier)
        response = self.client.get(reverse('promo_campaign_preview'), {'platform': 'sms'})
        self.assertEqual(response.status_code, 403)

    def test_send_flashes_summary(self):
        self.client.force_login(self.manager)
        response = self.client.post(reverse('promo_campaign_send'), {
            'platform': 'sms', 'message': 'Hi {name}',
        })

        self.assertEqual(response.status_code, 302)
        self.assertEqual(self.flashed(response), ['SMS promo sent. Sent: 0, Failed: 1, Audience: 1.'])
        log = SmsLog.objects.get()
        self.assertEqual(log.message, 'Hi Sara')
        self.assertEqual(log.provider_response, 'SMS provider disabled in environment.')

    def test_send_with_no_match(self):
        self.client.force_login(self.manager)
        response = self.client.post(reverse('promo_campaign_send'), {
            'platform': 'sms', 'message': 'Hi', 'search': 'nobody',
        })
        self.assertEqual(self.flashed(response), [NO_MATCH_MESSAGE])

    def test_send_rejects_long_sms_and_inverted_range(self):
        self.client.force_login(self.manager)
        response = self.client.post(reverse('promo_campaign_send'), {
            'platform': 'sms', 'message': 'x' * 481,
        })
        self.assertTrue(any('480' in message for message in self.flashed(response)))

        response = self.client.post(reverse('promo_campaign_send'), {
            'platform': 'sms', 'message': 'Hi', 'orders_min': 4, 'orders_max': 1,
        })
        self.assertEqual(
            self.flashed(response)[-1],
            'Order range is invalid. Min orders cannot be greater than max orders.'
        )
        self.assertFalse(SmsLog.objects.exists())

    def test_send_requires_permission(self):
        self.client.force_login(self.cashier)
        response = self.client.post(reverse('promo_campaign_send'), {
            'platform': 'sms', 'message': 'Hi',
        })

        self.assertRedirects(response, reverse('admin:index'), fetch_redirect_response=False)
        self.assertFalse(SmsLog.objects.exists())

    def test_template_list_and_update(self):
        self.client.force_login(self.manager)
        response = self.client.get(reverse('sms_template_list'))

        self.assertEqual(response.status_code, 200)
        templates = {template['key']: template for template in response.json()['templates']}
        self.assertIn('promo_default', templates)
        self.assertTrue(response.json()['placeholders'])

        template_id = templates['promo_default']['id']
        response = self.client.post(reverse('sms_template_update', args=[template_id]), {
            'label': 'Default promo', 'body': 'Hi {name}!', 'is_active': 'on',
        })
        self.assertEqual(self.flashed(response), ['SMS template updated.'])
        self.assertEqual(SmsTemplate.objects.get(pk=template_id).body, 'Hi {name}!')

    def test_phone_list_store_and_delete(self):
        self.client.force_login(self.manager)
        response = self.client.post(reverse('sms_phone_list_store'), {
            'phone': '+251 911 000 111', 'list_type': SmsPhoneList.LIST_BLACKLIST,
        })
        self.assertEqual(self.flashed(response), ['Phone list updated.'])
        entry = SmsPhoneList.objects.get()
        self.assertEqual(entry.normalized_phone, '911000111')

        # Same number again updates the entry
        self.client.post(reverse('sms_phone_list_store'), {
            'phone': '0911000111', 'list_type': SmsPhoneList.LIST_BLACKLIST, 'note': 'opted out',
        })
        self.assertEqual(SmsPhoneList.objects.get().note, 'opted out')

        response = self.client.post(reverse('sms_phone_list_delete', args=[entry.pk]))
        self.assertEqual(self.flashed(response)[-1], 'Phone list entry removed.')
        self.assertFalse(SmsPhoneList.objects.exists())

    def test_phone_list_rejects_invalid_phone(self):
        self.client.force_login(self.manager)
        self.client.post(reverse('sms_phone_list_store'), {
            'phone': '12345', 'list_type': SmsPhoneList.LIST_WHITELIST,
        })
        self.assertFalse(SmsPhoneList.objects.exists())

    def test_contacts_import(self):
        self.client.force_login(self.manager)
        upload = SimpleUploadedFile(
            'contacts.csv',
            b'name,phone\nSara T,0911000111\nNew Guest,+251 922 000 222\n,0933000333\nBad,123\nOnly one column\n',
            content_type='text/csv',
        )

        response = self.client.post(reverse('customer_contacts_import'), {'file': upload})

        self.assertEqual(
            self.flashed(response),
            ['Contact import complete. Created: 2, Updated: 1, Skipped: 2.']
        )
        self.sara.refresh_from_db()
        self.assertEqual(self.sara.name, 'Sara T')
        self.assertTrue(Customer.objects.filter(phone='+251922000222', name='New Guest').exists())
        self.assertTrue(Customer.objects.filter(phone='+251933000333', name='Customer 0333').exists())

    def test_contacts_import_matches_legacy_phone_format(self):
        legacy = self.create_customer('Legacy', '0944000444')
        self.client.force_login(self.manager)
        upload = SimpleUploadedFile('contacts.csv', b'Legacy Guest,251944000444\n')

        self.client.post(reverse('customer_contacts_import'), {'file': upload})

        legacy.refresh_from_db()
        self.assertEqual(legacy.phone, '+251944000444')
        self.assertEqual(legacy.name, 'Legacy Guest')

    def test_contacts_import_without_file(self):
        self.client.force_login(self.manager)
        response = self.client.post(reverse('customer_contacts_import'))
        self.assertEqual(self.flashed(response), ['No file uploaded.'])


@override_settings(SMS_ETHIOPIA=SMS_DISABLED)
class MarketingViewFiltersTest(PromoFixtureMixin, TestCase):
    """Branch and menu item filters posted through the dashboard forms"""

    def setUp(self):
        self.bole = self.create_branch('Bole')
        self.piassa = self.create_branch('Piassa')
        self.latte = MenuItem.objects.create(name='Latte', price=Decimal('60.00'))
        self.cake = MenuItem.objects.create(name='Cake', price=Decimal('80.00'))
        self.manager = self.create_staff('bole_manager', branches=[self.bole])

        self.sara = self.create_customer('Sara', '+251911000111')
        self.abel = self.create_customer('Abel', '+251922000222')
        self.hana = self.create_customer('Hana', '+251933000333')

        self.create_order(self.sara, self.bole, 100, days_ago=3, items=[(self.latte, 1)])
        self.create_order(self.sara, self.bole, 150, days_ago=2, items=[(self.latte, 2)])
        self.create_order(self.abel, self.bole, 90, days_ago=1, items=[(self.cake, 1)])
        self.create_order(self.hana, self.piassa, 100, days_ago=3)
        self.create_order(self.hana, self.piassa, 100, days_ago=2)

        self.client.force_login(self.manager)

    def preview(self, **params):
        response = self.client.get(reverse('promo_campaign_preview'), dict(platform='sms', **params))
        self.assertEqual(response.status_code, 200)
        return response.json()

    def flashed(self, response):
        return [str(message) for message in get_messages(response.wsgi_request)]

    def test_preview_out_of_scope_branch_matches_nobody(self):
        self.assertEqual(self.preview()['summary']['matched_customers'], 2)

        payload = self.preview(branch_ids=[self.piassa.pk])
        self.assertEqual(payload['summary']['matched_customers'], 0)
        self.assertEqual(payload['sample'], [])

    def test_preview_menu_item_filters(self):
        included = self.preview(include_menu_item_ids=[self.latte.pk])
        self.assertEqual([row['id'] for row in included['sample']], [self.sara.pk])

        excluded = self.preview(exclude_menu_item_ids=[self.cake.pk])
        self.assertEqual([row['id'] for row in excluded['sample']], [self.sara.pk])

    def test_send_to_out_of_scope_branch_sends_nothing(self):
        response = self.client.post(reverse('promo_campaign_send'), {
            'platform': 'sms', 'message': 'Hi {name}', 'branch_ids': [self.piassa.pk],
        })

        self.assertEqual(self.flashed(response), [NO_MATCH_MESSAGE])
        self.assertFalse(SmsLog.objects.exists())

    def test_branch_manager_campaign_through_form(self):
        """Bole manager asks for Bole and Piassa with at least two orders"""
        response = self.client.post(reverse('promo_campaign_send'), {
            'platform': 'sms',
            'message': 'Hi {name}',
            'branch_ids': [self.bole.pk, self.piassa.pk],
            'orders_min': 2,
        })

        self.assertEqual(self.flashed(response), ['SMS promo sent. Sent: 0, Failed: 1, Audience: 1.'])
        log = SmsLog.objects.get()
        self.assertEqual(log.customer, self.sara)
        self.assertEqual(log.message, 'Hi Sara')


class ManagementCommandTest(PromoFixtureMixin, TestCase):

    def setUp(self):
        self.bole = self.create_branch('Bole')
        self.manager = self.create_staff('bole_manager', branches=[self.bole])
        self.sara = self.create_customer('Sara', '+251911000111')
        self.create_order(self.sara, self.bole, 150, days_ago=2)

    def test_sync_sms_templates(self):
        SmsTemplate.objects.all().delete()
        out = StringIO()

        call_command('sync_sms_templates', stdout=out)
        self.assertIn('Created', out.getvalue())

        out = StringIO()
        call_command('sync_sms_templates', stdout=out)
        self.assertIn('already up to date', out.getvalue())

    def test_preview_does_not_send(self):
        out = StringIO()
        with patch('marketing.management.commands.send_promo_campaign.CampaignDispatcher') as dispatcher:
            call_command('send_promo_campaign', '--actor', 'bole_manager', '--preview', stdout=out)

        dispatcher.assert_not_called()
        self.assertIn('matched_customers', out.getvalue())
        self.assertIn('Sara', out.getvalue())

    def test_send_with_filters_file(self):
        with tempfile.NamedTemporaryFile('w', suffix='.json', delete=False) as handle:
            json.dump({'orders_min': 1, 'search': 'sara'}, handle)
        self.addCleanup(os.remove, handle.name)

        out = StringIO()
        result = CampaignResult(platform='sms', sent=1, audience_size=1)
        with patch('marketing.management.commands.send_promo_campaign.CampaignDispatcher') as dispatcher:
            dispatcher.return_value.send_campaign.return_value = result
            call_command(
                'send_promo_campaign', '--actor', 'bole_manager', '--message', 'Hi {name}',
                '--filters', handle.name, '--save-template', stdout=out,
            )

        actor, spec, message, options = dispatcher.return_value.send_campaign.call_args.args
        self.assertEqual(actor, self.manager)
        self.assertEqual(spec.orders_min, 1)
        self.assertEqual(spec.search, 'sara')
        self.assertEqual(message, 'Hi {name}')
        self.assertTrue(options['save_template'])
        self.assertIn('SMS promo sent. Sent: 1', out.getvalue())

    def test_errors(self):
        with self.assertRaises(CommandError):
            call_command('send_promo_campaign', '--actor', 'ghost', '--message', 'Hi')
        with self.assertRaises(CommandError):
            call_command('send_promo_campaign', '--actor', 'bole_manager')

        with tempfile.NamedTemporaryFile('w', suffix='.json', delete=False) as handle:
            json.dump({'orders_min': 5, 'orders_max': 1}, handle)
        self.addCleanup(os.remove, handle.name)
        with self.assertRaisesMessage(CommandError, 'Order range is invalid'):
            call_command(
                'send_promo_campaign', '--actor', 'bole_manager', '--message', 'Hi',
                '--filters', handle.name,
            )
