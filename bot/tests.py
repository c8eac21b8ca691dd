"""
Tests for the Telegram notification client
"""
from unittest.mock import Mock, patch

import requests
from django.test import SimpleTestCase, override_settings
from telebot import types
from telebot.apihelper import ApiTelegramException

from bot.notification_service import (
    TelegramBotClient, build_inline_button, clear_bot_cache, get_bot_instance,
)


@override_settings(TELEGRAM_BOT_TOKEN='123456:TEST-TOKEN', TELEGRAM_HTTP_TIMEOUT=7)
class TelegramBotClientTest(SimpleTestCase):

    def setUp(self):
        clear_bot_cache()
        self.addCleanup(clear_bot_cache)
        patcher = patch('bot.notification_service.telebot.TeleBot')
        self.TeleBot = patcher.start()
        self.addCleanup(patcher.stop)
        self.bot = self.TeleBot.return_value

    def test_send_plain_message(self):
        TelegramBotClient().send_message(1001, 'Hello Sara')

        self.TeleBot.assert_called_once_with('123456:TEST-TOKEN', threaded=False)
        self.bot.send_message.assert_called_once_with(
            1001, 'Hello Sara', reply_markup=None, disable_web_page_preview=None, timeout=7,
        )

    def test_send_with_inline_button(self):
        TelegramBotClient().send_message(1001, 'Hello', {
            'button': {'text': 'Order now', 'url': 'https://cafe.example/menu'},
        })

        markup = self.bot.send_message.call_args.kwargs['reply_markup']
        self.assertIsInstance(markup, types.InlineKeyboardMarkup)
        button = markup.keyboard[0][0]
        self.assertEqual(button.text, 'Order now')
        self.assertEqual(button.url, 'https://cafe.example/menu')

    def test_bot_instances_are_cached_per_token(self):
        self.assertIs(get_bot_instance('token-a'), get_bot_instance('token-a'))
        self.assertEqual(self.TeleBot.call_count, 1)
        self.assertIsNone(get_bot_instance(''))

    def test_api_error_is_logged_not_raised(self):
        self.bot.send_message.side_effect = ApiTelegramException(
            'sendMessage', Mock(), {'error_code': 403, 'description': 'Forbidden: bot was blocked by the user'}
        )

        with self.assertLogs('bot.notification_service', level='WARNING') as logs:
            result = TelegramBotClient().send_message(1001, 'Hello', context={'customer_id': 5})

        self.assertIsNone(result)
        self.assertIn('403', logs.output[0])
        self.assertIn("'customer_id': 5", logs.output[0])

    def test_transport_error_is_logged_not_raised(self):
        self.bot.send_message.side_effect = requests.ConnectionError('timed out')

        with self.assertLogs('bot.notification_service', level='WARNING'):
            TelegramBotClient().send_message(1001, 'Hello')

    @override_settings(TELEGRAM_BOT_TOKEN='')
    def test_missing_token_skips_send(self):
        with self.assertLogs('bot.notification_service', level='WARNING'):
            TelegramBotClient().send_message(1001, 'Hello')

        self.TeleBot.assert_not_called()


class InlineButtonTest(SimpleTestCase):

    def test_button_needs_text_and_url(self):
        self.assertIsNone(build_inline_button(None))
        self.assertIsNone(build_inline_button({'text': 'Order', 'url': ''}))
        self.assertIsNone(build_inline_button({'text': '  ', 'url': 'https://cafe.example'}))
        self.assertIsInstance(
            build_inline_button({'text': 'Order', 'url': 'https://cafe.example'}),
            types.InlineKeyboardMarkup,
        )
