"""
Tests for promo targeting

Covers:
- Template rendering and placeholder context
- Range validation
- Audience builder (branch scope, dedup, sub-filters, recency band)
- Audience preview summary and sample
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.contrib.auth.models import User
from django.test import TestCase, SimpleTestCase, override_settings

from accounts.models import Customer
from menu.models import MenuItem
from orders.models import Order, OrderItem
from organizations.models import AdminUser, Branch, Role
from marketing.audience import (
    AudienceRangeError, CampaignFilterSpec, build_audience,
    effective_branch_ids, ordered, validate_ranges,
)
from marketing.forms import PromoAudienceForm
from marketing.models import SmsTemplate
from marketing.preview_service import preview_audience
from marketing.template_service import SmsTemplateService, render

# 15:00 in Addis Ababa
NOW = datetime(2026, 3, 10, 12, 0, tzinfo=dt_timezone.utc)


class PromoFixtureMixin:
    """Shared builders for branches, staff, customers and orders"""

    def create_branch(self, name, **kwargs):
        return Branch.objects.create(name=name, **kwargs)

    def create_staff(self, username, role_name=Role.BRANCH_MANAGER, branches=(), superuser=False):
        if superuser:
            return User.objects.create_superuser(username, f'{username}@example.com', 'password')

        user = User.objects.create_user(username, f'{username}@example.com', 'password')
        role, _ = Role.objects.get_or_create(
            name=role_name,
            defaults={'can_send_campaigns': True, 'can_manage_templates': True, 'can_view_customers': True},
        )
        profile = AdminUser.objects.create(user=user, role=role)
        profile.branches.add(*branches)
        return user

    def create_customer(self, name, phone, telegram_id=None, telegram_username=None):
        return Customer.objects.create(
            name=name, phone=phone, telegram_id=telegram_id, telegram_username=telegram_username
        )

    def create_order(self, customer, branch, total, days_ago=1, items=(), **kwargs):
        order = Order.objects.create(
            customer=customer,
            branch=branch,
            total_amount=Decimal(str(total)),
            created_at=NOW - timedelta(days=days_ago),
            **kwargs
        )
        for menu_item, quantity in items:
            OrderItem.objects.create(
                order=order,
                menu_item=menu_item,
                quantity=quantity,
                unit_price=menu_item.price if menu_item else Decimal('0'),
            )
        return order


class TemplateRenderTest(SimpleTestCase):
    """Placeholder substitution"""

    def test_known_tokens_are_replaced(self):
        self.assertEqual(
            render('Hi {name}, total {total}', {'name': 'Sara', 'total': '120.00'}),
            'Hi Sara, total 120.00'
        )

    def test_unknown_tokens_pass_through(self):
        self.assertEqual(render('Hi {unknown}', {}), 'Hi {unknown}')
        self.assertEqual(render('Hi {name} {x-y}', {'name': 'Abel'}), 'Hi Abel {x-y}')

    def test_tokens_match_case_insensitively(self):
        self.assertEqual(render('Hi {NAME} / {Name}', {'name': 'Sara'}), 'Hi Sara / Sara')
        self.assertEqual(render('{branch}', {'BRANCH': 'Bole'}), 'Bole')

    def test_values_are_stringified(self):
        rendered = render('{a}|{b}|{c}|{d}|{e}', {
            'a': None, 'b': True, 'c': False, 'd': '  padded ', 'e': Decimal('12.50'),
        })
        self.assertEqual(rendered, '|true|false|padded|12.50')


class SmsTemplateServiceTest(PromoFixtureMixin, TestCase):
    """Stored templates and customer/order placeholder context"""

    def setUp(self):
        self.service = SmsTemplateService()
        self.bole = self.create_branch('Bole', address='Bole Road')
        self.piassa = self.create_branch('Piassa')
        self.latte = MenuItem.objects.create(name='Latte', price=Decimal('60.00'))
        self.croissant = MenuItem.objects.create(name='Croissant', price=Decimal('45.00'))
        self.juice = MenuItem.objects.create(name='Juice', price=Decimal('50.00'))
        self.customer = self.create_customer('Sara', '+251911000111')

    @override_settings(SMS_TEMPLATES={
        'order_ready': {'label': 'Order Ready', 'body': 'Ready {orderid}'},
        'empty': {'label': 'Empty', 'body': '   '},
    })
    def test_sync_default_templates_is_idempotent(self):
        self.assertEqual(self.service.sync_default_templates(), 1)
        self.assertEqual(self.service.sync_default_templates(), 0)
        self.assertTrue(SmsTemplate.objects.filter(key='order_ready').exists())
        self.assertFalse(SmsTemplate.objects.filter(key='empty').exists())

    @override_settings(SMS_TEMPLATES={'order_ready': {'label': 'Order Ready', 'body': 'Config {name}'}})
    def test_render_named_prefers_active_stored_template(self):
        SmsTemplate.objects.create(key='order_ready', label='Custom', body='Stored {name}')
        self.assertEqual(self.service.render_named('order_ready', {'name': 'Sara'}), 'Stored Sara')

        SmsTemplate.objects.filter(key='order_ready').update(is_active=False)
        self.assertEqual(self.service.render_named('order_ready', {'name': 'Sara'}), 'Config Sara')

        self.assertEqual(
            self.service.render_named('missing_key', {'name': 'Sara'}, fallback='Fallback {name}'),
            'Fallback Sara'
        )

    def test_templates_and_placeholders(self):
        SmsTemplate.objects.create(key='zz_inactive', label='Old', body='Old', is_active=False)

        active_keys = [template['key'] for template in self.service.templates()]
        all_keys = [template['key'] for template in self.service.templates(include_inactive=True)]

        self.assertIn('promo_default', active_keys)
        self.assertNotIn('zz_inactive', active_keys)
        self.assertIn('zz_inactive', all_keys)
        self.assertIn({'token': 'name', 'description': 'Customer name'}, self.service.placeholders())

    def test_customer_without_orders_gets_empty_order_variables(self):
        variables = self.service.variables_for_customer(self.customer)

        self.assertEqual(variables['name'], 'Sara')
        self.assertEqual(variables['phone'], '+251911000111')
        for key in ('orderid', 'branch', 'total', 'itemlist', 'trackinglink',
                    'recent_item', 'freq_item', 'freq_branch'):
            self.assertEqual(variables[key], '', key)

    @override_settings(TRACKING_URL_TEMPLATE='https://cafe.example/track/{token}')
    def test_variables_from_latest_order(self):
        self.create_order(self.customer, self.piassa, 300, days_ago=20,
                          items=[(self.juice, 5)])
        latest = self.create_order(
            self.customer, self.bole, 120, days_ago=2,
            items=[(self.latte, 2), (self.croissant, 2)],
            pickup_date=(NOW - timedelta(days=1)).date(),
        )

        variables = self.service.variables_for_customer(self.customer)

        self.assertEqual(variables['orderid'], str(latest.pk))
        self.assertEqual(variables['branch'], 'Bole')
        self.assertEqual(variables['branchaddress'], 'Bole Road')
        self.assertEqual(variables['total'], '120.00')
        self.assertEqual(variables['itemlist'], 'Latte x2, Croissant x2')
        self.assertEqual(variables['itemcount'], '4')
        self.assertEqual(variables['itemid'], str(self.latte.pk))
        self.assertEqual(variables['itemids'], f'{self.latte.pk},{self.croissant.pk}')
        self.assertEqual(variables['pickupdate'], '2026-03-09')
        self.assertEqual(variables['trackinglink'], f'https://cafe.example/track/{latest.tracking_token}')
        # Equal quantities: the later line wins
        self.assertEqual(variables['recent_item'], 'Croissant')
        self.assertEqual(variables['recent_branch'], 'Bole')
        # Juice x5 outweighs Latte x2 and Croissant x2
        self.assertEqual(variables['freq_item'], 'Juice')

    def test_frequent_branch_ties_break_on_latest_order(self):
        self.create_order(self.customer, self.piassa, 10, days_ago=10)
        self.create_order(self.customer, self.bole, 10, days_ago=5)

        variables = self.service.variables_for_customer(self.customer)
        self.assertEqual(variables['freq_branch'], 'Bole')

        self.create_order(self.customer, self.piassa, 10, days_ago=30)
        variables = self.service.variables_for_customer(self.customer)
        self.assertEqual(variables['freq_branch'], 'Piassa')

    def test_order_restriction_limits_context(self):
        self.create_order(self.customer, self.bole, 80, days_ago=10, items=[(self.latte, 1)])
        self.create_order(self.customer, self.piassa, 90, days_ago=1, items=[(self.juice, 3)])

        bole_orders = Order.objects.filter(branch=self.bole)
        variables = self.service.variables_for_customer(self.customer, orders=bole_orders)

        self.assertEqual(variables['branch'], 'Bole')
        self.assertEqual(variables['freq_item'], 'Latte')
        self.assertEqual(variables['freq_branch'], 'Bole')

    def test_deleted_menu_item_renders_placeholder_name(self):
        order = self.create_order(self.customer, self.bole, 50, items=[(self.juice, 1)])
        item = order.items.get()
        self.juice.delete()

        variables = self.service.variables_for_order(Order.objects.get(pk=order.pk))
        item.refresh_from_db()
        self.assertIsNone(item.menu_item_id)
        self.assertEqual(variables['itemid'], '')
        self.assertTrue(variables['itemlist'].startswith('Item #'))

    def test_synthetic_phone_is_not_exposed(self):
        walk_in = self.create_customer('Table 3', 'q0123456789abcdef012')
        self.assertEqual(self.service.variables_for_customer(walk_in)['phone'], '')


class RangeValidationTest(PromoFixtureMixin, TestCase):
    """Inverted min/max pairs are rejected before any query runs"""

    def test_each_range_message(self):
        cases = [
            ({'orders_min': 5, 'orders_max': 2},
             'Order range is invalid. Min orders cannot be greater than max orders.'),
            ({'recency_min_days': 30, 'recency_max_days': 7},
             'Recency window is invalid. Min days cannot be greater than max days.'),
            ({'total_spent_min': '500', 'total_spent_max': '100'},
             'Total spend range is invalid. Min spend cannot be greater than max spend.'),
            ({'avg_order_value_min': '90.5', 'avg_order_value_max': '90'},
             'Average order value range is invalid. Min AOV cannot be greater than max AOV.'),
        ]
        for data, message in cases:
            self.assertEqual(validate_ranges(CampaignFilterSpec.from_data(data)), message)

    def test_first_violation_wins(self):
        spec = CampaignFilterSpec.from_data({
            'total_spent_min': 10, 'total_spent_max': 1, 'orders_min': 3, 'orders_max': 1,
        })
        self.assertTrue(validate_ranges(spec).startswith('Order range'))

    def test_valid_and_open_ranges(self):
        self.assertIsNone(validate_ranges(CampaignFilterSpec.from_data({
            'orders_min': 2, 'orders_max': 2, 'recency_max_days': 5, 'total_spent_min': 100,
        })))

    def test_build_and_preview_raise(self):
        admin = self.create_staff('root', superuser=True)
        spec = CampaignFilterSpec.from_data({'orders_min': 5, 'orders_max': 1})

        with self.assertRaises(AudienceRangeError):
            build_audience(admin, spec, now=NOW)
        with self.assertRaises(AudienceRangeError) as ctx:
            preview_audience(admin, spec, now=NOW)
        self.assertIn('Order range is invalid', ctx.exception.message)


class CampaignFilterSpecTest(SimpleTestCase):

    def test_from_data_parses_mixed_input(self):
        spec = CampaignFilterSpec.from_data({
            'platform': ' Telegram ',
            'search': '  sara ',
            'branch_ids': '3,1,3,x',
            'include_menu_item_ids': [5, '6'],
            'orders_min': '2',
            'total_spent_max': '150.50',
            'recency_max_days': '',
        })

        self.assertEqual(spec.platform, 'telegram')
        self.assertEqual(spec.search, 'sara')
        self.assertEqual(spec.branch_ids, [3, 1])
        self.assertEqual(spec.include_menu_item_ids, [5, 6])
        self.assertEqual(spec.orders_min, 2)
        self.assertEqual(spec.total_spent_max, Decimal('150.50'))
        self.assertIsNone(spec.recency_max_days)
        self.assertEqual(spec.exclude_menu_item_ids, [])


class PromoAudienceFormTest(PromoFixtureMixin, TestCase):
    """Model choice fields become id lists on the filter"""

    def test_selected_branches_and_items_reach_the_filter(self):
        bole = self.create_branch('Bole')
        piassa = self.create_branch('Piassa')
        latte = MenuItem.objects.create(name='Latte', price=Decimal('60.00'))
        cake = MenuItem.objects.create(name='Cake', price=Decimal('80.00'))

        form = PromoAudienceForm({
            'platform': 'sms',
            'branch_ids': [piassa.pk, bole.pk],
            'include_menu_item_ids': [latte.pk],
            'exclude_menu_item_ids': [cake.pk],
        })
        self.assertTrue(form.is_valid(), form.errors)

        spec = form.to_filter_spec()
        self.assertEqual(sorted(spec.branch_ids), sorted([bole.pk, piassa.pk]))
        self.assertEqual(spec.include_menu_item_ids, [latte.pk])
        self.assertEqual(spec.exclude_menu_item_ids, [cake.pk])

    def test_from_data_accepts_querysets_and_instances(self):
        bole = self.create_branch('Bole')
        self.create_branch('Piassa')

        spec = CampaignFilterSpec.from_data({
            'branch_ids': Branch.objects.filter(name='Bole'),
            'include_menu_item_ids': MenuItem.objects.none(),
            'exclude_menu_item_ids': bole,
        })

        self.assertEqual(spec.branch_ids, [bole.pk])
        self.assertEqual(spec.include_menu_item_ids, [])
        self.assertEqual(spec.exclude_menu_item_ids, [bole.pk])


class AudienceBuilderTest(PromoFixtureMixin, TestCase):
    """Audience rows, branch scope and sub-filters"""

    def setUp(self):
        self.bole = self.create_branch('Bole')
        self.piassa = self.create_branch('Piassa')
        self.latte = MenuItem.objects.create(name='Latte', price=Decimal('60.00'))
        self.cake = MenuItem.objects.create(name='Cake', price=Decimal('80.00'))

        self.admin = self.create_staff('root', superuser=True)
        self.manager = self.create_staff('bole_manager', branches=[self.bole])
        self.unassigned = self.create_staff('new_staff')

        self.sara = self.create_customer('Sara Tesfaye', '+251911000111', telegram_id=1001,
                                         telegram_username='sarat')
        self.abel = self.create_customer('Abel Girma', '+251922000222')
        self.hana = self.create_customer('Hana Bekele', '+251933000333', telegram_id=1003)
        self.no_orders = self.create_customer('Never Ordered', '+251944000444')

    def audience(self, actor=None, **data):
        return build_audience(actor or self.admin, CampaignFilterSpec.from_data(data), now=NOW)

    def test_one_row_per_customer_with_aggregates(self):
        totals = [100, 200, 50, 25, 125]
        for index, total in enumerate(totals):
            branch = self.bole if index % 2 == 0 else self.piassa
            self.create_order(self.sara, branch, total, days_ago=index + 1,
                              items=[(self.latte, 1), (self.cake, 1)])

        rows = list(self.audience())
        self.assertEqual([row.pk for row in rows], [self.sara.pk])
        row = rows[0]
        self.assertEqual(row.orders_count, 5)
        self.assertEqual(row.total_spent, Decimal('500'))
        self.assertEqual(Decimal(str(row.average_order_value)).quantize(Decimal('0.01')), Decimal('100.00'))
        self.assertEqual(row.last_order_at, NOW - timedelta(days=1))

    def test_customers_without_orders_are_excluded(self):
        self.create_order(self.abel, self.bole, 10)
        self.assertNotIn(self.no_orders.pk, [row.pk for row in self.audience()])

    def test_manager_aggregates_are_branch_scoped(self):
        self.create_order(self.sara, self.bole, 100, days_ago=3)
        self.create_order(self.sara, self.bole, 100, days_ago=2)
        self.create_order(self.sara, self.piassa, 1000, days_ago=1)
        self.create_order(self.abel, self.piassa, 500)

        rows = list(self.audience(self.manager))
        self.assertEqual([row.pk for row in rows], [self.sara.pk])
        self.assertEqual(rows[0].orders_count, 2)
        self.assertEqual(rows[0].total_spent, Decimal('200'))
        self.assertEqual(rows[0].last_order_at, NOW - timedelta(days=2))

    def test_staff_without_branches_get_no_rows(self):
        self.create_order(self.sara, self.bole, 100)
        self.assertEqual(self.audience(self.unassigned).count(), 0)
        self.assertEqual(self.audience(self.unassigned, orders_min=0).count(), 0)

    def test_requested_branch_outside_scope_forces_empty(self):
        self.create_order(self.sara, self.bole, 100)
        self.create_order(self.abel, self.piassa, 100)

        self.assertEqual(self.audience(self.manager, branch_ids=[self.piassa.pk]).count(), 0)
        self.assertEqual(self.audience(self.manager).count(), 1)

    def test_branch_filter_intersects_with_scope(self):
        self.create_order(self.sara, self.bole, 100)
        self.create_order(self.abel, self.piassa, 100)

        self.assertEqual(
            effective_branch_ids(self.manager, [self.bole.pk, self.piassa.pk]), [self.bole.pk]
        )
        self.assertEqual(
            effective_branch_ids(self.admin, [self.bole.pk, self.piassa.pk]),
            [self.bole.pk, self.piassa.pk]
        )
        rows = self.audience(self.manager, branch_ids=[self.bole.pk, self.piassa.pk])
        self.assertEqual([row.pk for row in rows], [self.sara.pk])

        admin_rows = self.audience(branch_ids=[self.piassa.pk])
        self.assertEqual([row.pk for row in admin_rows], [self.abel.pk])

    def test_telegram_platform_requires_telegram_id(self):
        for customer in (self.sara, self.abel, self.hana):
            self.create_order(customer, self.bole, 100)

        telegram_ids = {row.pk for row in self.audience(platform='telegram')}
        self.assertEqual(telegram_ids, {self.sara.pk, self.hana.pk})
        self.assertEqual(self.audience(platform='sms').count(), 3)

    def test_search_matches_name_phone_and_username(self):
        for customer in (self.sara, self.abel, self.hana):
            self.create_order(customer, self.bole, 100)

        self.assertEqual([r.pk for r in self.audience(search='girma')], [self.abel.pk])
        self.assertEqual([r.pk for r in self.audience(search='933000')], [self.hana.pk])
        self.assertEqual([r.pk for r in self.audience(search='SARAT')], [self.sara.pk])

    def test_include_and_exclude_menu_items(self):
        self.create_order(self.sara, self.bole, 100, items=[(self.latte, 1)])
        self.create_order(self.abel, self.bole, 100, items=[(self.latte, 1), (self.cake, 1)])
        self.create_order(self.hana, self.bole, 100, items=[(self.cake, 2)])

        included = {row.pk for row in self.audience(include_menu_item_ids=[self.latte.pk])}
        self.assertEqual(included, {self.sara.pk, self.abel.pk})

        excluded = {row.pk for row in self.audience(exclude_menu_item_ids=[self.cake.pk])}
        self.assertEqual(excluded, {self.sara.pk})

        both = {row.pk for row in self.audience(
            include_menu_item_ids=[self.latte.pk], exclude_menu_item_ids=[self.cake.pk]
        )}
        self.assertEqual(both, {self.sara.pk})

    def test_item_filters_ignore_out_of_scope_orders(self):
        self.create_order(self.sara, self.bole, 100, items=[(self.latte, 1)])
        self.create_order(self.sara, self.piassa, 100, items=[(self.cake, 1)])

        rows = self.audience(self.manager, exclude_menu_item_ids=[self.cake.pk])
        self.assertEqual([row.pk for row in rows], [self.sara.pk])
        self.assertEqual(self.audience(self.manager, include_menu_item_ids=[self.cake.pk]).count(), 0)

    def test_recency_band(self):
        self.create_order(self.sara, self.bole, 100, days_ago=10)

        self.assertEqual(self.audience(recency_max_days=30).count(), 1)
        self.assertEqual(self.audience(recency_max_days=5).count(), 0)
        # Last order 10 days ago: no order within the last 5 days
        self.assertEqual(self.audience(recency_min_days=5).count(), 1)
        self.assertEqual(self.audience(recency_min_days=15).count(), 0)
        self.assertEqual(self.audience(recency_min_days=5, recency_max_days=30).count(), 1)
        self.assertEqual(self.audience(recency_min_days=0).count(), 1)

    def test_recency_uses_day_boundaries(self):
        # 2026-02-28 23:30 local time, 9 days and some hours before NOW
        self.create_order(self.sara, self.bole, 100, days_ago=9)
        Order.objects.filter(customer=self.sara).update(
            created_at=datetime(2026, 2, 28, 20, 30, tzinfo=dt_timezone.utc)
        )

        # Start of 2026-02-28 local is inside a 10-day window
        self.assertEqual(self.audience(recency_max_days=10).count(), 1)
        # End of 2026-02-28 local is not before the order
        self.assertEqual(self.audience(recency_min_days=10).count(), 1)
        self.assertEqual(self.audience(recency_min_days=11).count(), 0)

    def test_recent_out_of_scope_order_does_not_block_dormancy(self):
        self.create_order(self.sara, self.bole, 100, days_ago=40)
        self.create_order(self.sara, self.piassa, 100, days_ago=1)

        self.assertEqual(self.audience(self.manager, recency_min_days=30).count(), 1)
        self.assertEqual(self.audience(self.admin, recency_min_days=30).count(), 0)

    def test_aggregate_ranges(self):
        self.create_order(self.sara, self.bole, 100, days_ago=1)
        self.create_order(self.sara, self.bole, 300, days_ago=2)
        self.create_order(self.abel, self.bole, 50)
        self.create_order(self.hana, self.bole, 2500)

        self.assertEqual({r.pk for r in self.audience(orders_min=2)}, {self.sara.pk})
        self.assertEqual({r.pk for r in self.audience(orders_max=1)}, {self.abel.pk, self.hana.pk})
        self.assertEqual({r.pk for r in self.audience(total_spent_min=400)}, {self.sara.pk, self.hana.pk})
        self.assertEqual({r.pk for r in self.audience(total_spent_max=400)}, {self.sara.pk, self.abel.pk})
        self.assertEqual({r.pk for r in self.audience(avg_order_value_min=200, avg_order_value_max=1000)},
                         {self.sara.pk})

    def test_ordering_helper(self):
        self.create_order(self.abel, self.bole, 10)
        self.create_order(self.abel, self.bole, 10)
        self.create_order(self.sara, self.bole, 900)
        self.create_order(self.hana, self.bole, 100)

        self.assertEqual(
            [row.pk for row in ordered(self.audience())],
            [self.abel.pk, self.sara.pk, self.hana.pk]
        )

    def test_branch_manager_scenario(self):
        """Bole manager asks for Bole and Piassa with at least two orders"""
        self.create_order(self.sara, self.bole, 100, days_ago=3)
        self.create_order(self.sara, self.bole, 150, days_ago=2)
        self.create_order(self.abel, self.bole, 100)
        self.create_order(self.hana, self.piassa, 100, days_ago=3)
        self.create_order(self.hana, self.piassa, 100, days_ago=2)

        rows = self.audience(
            self.manager, platform='sms', orders_min=2, branch_ids=[self.bole.pk, self.piassa.pk]
        )
        self.assertEqual([row.pk for row in rows], [self.sara.pk])


class PreviewServiceTest(PromoFixtureMixin, TestCase):
    """Preview summary and sample rows"""

    def setUp(self):
        self.bole = self.create_branch('Bole')
        self.piassa = self.create_branch('Piassa')
        self.latte = MenuItem.objects.create(name='Latte', price=Decimal('60.00'))
        self.admin = self.create_staff('root', superuser=True)
        self.manager = self.create_staff('bole_manager', branches=[self.bole])

        self.sara = self.create_customer('Sara', '+251911000111', telegram_username='sarat')
        self.abel = self.create_customer('Abel', '+251922000222')
        self.hana = self.create_customer('Hana', 'q0123456789abcdef012')

        self.create_order(self.sara, self.bole, 1500, days_ago=5, items=[(self.latte, 2)])
        self.create_order(self.sara, self.bole, 1000, days_ago=100)
        self.create_order(self.abel, self.bole, 300, days_ago=120)
        self.create_order(self.hana, self.piassa, 60, days_ago=1)

    def test_summary(self):
        summary = preview_audience(self.admin, CampaignFilterSpec(), now=NOW)['summary']

        self.assertEqual(summary['matched_customers'], 3)
        self.assertEqual(summary['high_value_customers'], 1)
        self.assertEqual(summary['dormant_customers'], 1)
        self.assertEqual(summary['average_orders_per_customer'], 1.33)
        self.assertEqual(summary['average_total_spent'], 953.33)

    def test_empty_audience_defaults_to_zero(self):
        payload = preview_audience(self.admin, CampaignFilterSpec(search='nobody'), now=NOW)

        self.assertEqual(payload['sample'], [])
        self.assertEqual(payload['summary'], {
            'matched_customers': 0,
            'high_value_customers': 0,
            'dormant_customers': 0,
            'average_orders_per_customer': 0,
            'average_total_spent': 0,
        })

    def test_sample_rows(self):
        sample = preview_audience(self.admin, CampaignFilterSpec(), now=NOW)['sample']

        self.assertEqual([row['id'] for row in sample], [self.sara.pk, self.abel.pk, self.hana.pk])
        first = sample[0]
        self.assertEqual(first['orders_count'], 2)
        self.assertEqual(first['total_spent'], 2500.0)
        self.assertEqual(first['average_order_value'], 1250.0)
        self.assertEqual(first['recency_days'], 5)
        self.assertEqual(first['telegram_username'], 'sarat')
        self.assertEqual(first['last_order_at'], '2026-03-05 15:00:00')
        self.assertEqual(first['preview_variables']['recent_item'], 'Latte')
        self.assertEqual(first['preview_variables']['total'], '1500.00')
        self.assertTrue(all(isinstance(v, str) for v in first['preview_variables'].values()))

        self.assertEqual(first['phone'], '+251911000111')
        self.assertIsNone(sample[1]['telegram_username'])
        self.assertEqual(sample[2]['preview_variables']['phone'], '')
        # Table-session placeholder phones are not shown
        self.assertEqual(sample[2]['phone'], '')

    @override_settings(PROMO_SAMPLE_SIZE=1)
    def test_sample_size_is_limited(self):
        payload = preview_audience(self.admin, CampaignFilterSpec(), now=NOW)
        self.assertEqual(len(payload['sample']), 1)
        self.assertEqual(payload['summary']['matched_customers'], 3)

    def test_manager_preview_is_branch_scoped(self):
        payload = preview_audience(self.manager, CampaignFilterSpec(), now=NOW)

        self.assertEqual(payload['summary']['matched_customers'], 2)
        self.assertNotIn(self.hana.pk, [row['id'] for row in payload['sample']])
