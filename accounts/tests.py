"""
Tests for phone and Telegram identity normalization
"""
from django.test import SimpleTestCase, TestCase

from accounts.identity import (
    display_phone, is_synthetic_phone, normalize_phone, normalize_telegram_id,
    with_country_code, with_plus_country_code,
)
from accounts.models import Customer


class NormalizePhoneTest(SimpleTestCase):
    """Ethiopian mobile number formats"""

    def test_supported_formats_share_canonical_form(self):
        for raw in ('0911000111', '911000111', '+251911000111', '251911000111'):
            self.assertEqual(normalize_phone(raw), '911000111', raw)

    def test_formatting_characters_are_ignored(self):
        self.assertEqual(normalize_phone('+251 91-100 0111'), '911000111')
        self.assertEqual(normalize_phone('(0)711 000 111'), '711000111')

    def test_invalid_numbers(self):
        for raw in ('12345', '', None, '0811000111', '2518110001112', 'abc'):
            self.assertIsNone(normalize_phone(raw), raw)

    def test_country_code_helpers(self):
        self.assertEqual(with_country_code('911000111'), '251911000111')
        self.assertEqual(with_plus_country_code('911000111'), '+251911000111')
        self.assertIsNone(with_country_code('12345'))
        self.assertIsNone(with_plus_country_code(None))


class NormalizeTelegramIdTest(SimpleTestCase):

    def test_positive_values(self):
        self.assertEqual(normalize_telegram_id(123456789), 123456789)
        self.assertEqual(normalize_telegram_id(' 987654321 '), 987654321)

    def test_rejected_values(self):
        for raw in (0, -5, '0', '-12', '12a', '', None, True, 1.5, '１２３'):
            self.assertIsNone(normalize_telegram_id(raw), repr(raw))


class SyntheticPhoneTest(SimpleTestCase):

    def test_synthetic_detection(self):
        self.assertTrue(is_synthetic_phone('q0123456789abcdef012'))
        self.assertTrue(is_synthetic_phone('Q0123456789ABCDEF012'))
        self.assertFalse(is_synthetic_phone('q0123'))
        self.assertFalse(is_synthetic_phone('+251911000111'))
        self.assertFalse(is_synthetic_phone(None))

    def test_display_phone(self):
        self.assertEqual(display_phone(' +251911000111 '), '+251911000111')
        self.assertEqual(display_phone('q0123456789abcdef012'), '')
        self.assertEqual(display_phone(None), '')


class CustomerModelTest(TestCase):

    def test_synthetic_customer_has_no_display_phone(self):
        walk_in = Customer.objects.create(name='Table 4', phone='q0123456789abcdef012')
        customer = Customer.objects.create(name='Sara', phone='+251911000111')

        self.assertTrue(walk_in.has_synthetic_phone)
        self.assertEqual(walk_in.display_phone, '')
        self.assertFalse(customer.has_synthetic_phone)
        self.assertEqual(customer.display_phone, '+251911000111')
        self.assertIn('Sara', str(customer))
