"""
Telegram notification client

Outbound Telegram messages for staff-initiated sends (promo campaigns).
Delivery is fire-and-forget: API and transport errors are logged with the
message context and never raised to the caller.
"""

import logging

import requests
import telebot
from telebot import types
from telebot.apihelper import ApiTelegramException
from django.conf import settings

logger = logging.getLogger(__name__)

# Cache for bot instances to avoid creating new instances for every request
_bot_instances = {}


def get_bot_instance(bot_token):
    """
    Get or create a bot instance for the given token.
    Uses caching to avoid creating multiple instances for the same token.
    """
    if not bot_token:
        return None

    if bot_token not in _bot_instances:
        _bot_instances[bot_token] = telebot.TeleBot(bot_token, threaded=False)
        logger.info(f"Created new bot instance for token ending in ...{bot_token[-8:]}")

    return _bot_instances[bot_token]


def clear_bot_cache(bot_token=None):
    """Clear cached bot instances. If token provided, only clear that one."""
    global _bot_instances
    if bot_token and bot_token in _bot_instances:
        del _bot_instances[bot_token]
    elif bot_token is None:
        _bot_instances = {}


def build_inline_button(button):
    """
    One-button inline keyboard from {"text": ..., "url": ...}.
    Returns None unless both text and url are non-empty.
    """
    if not button:
        return None

    text = str(button.get("text") or "").strip()
    url = str(button.get("url") or "").strip()
    if not text or not url:
        return None

    markup = types.InlineKeyboardMarkup()
    markup.add(types.InlineKeyboardButton(text=text, url=url))
    return markup


class TelegramBotClient:
    """Sends plain-text messages with the platform bot (TELEGRAM_BOT_TOKEN)"""

    def __init__(self, bot_token=None, timeout=None):
        if bot_token is None:
            bot_token = getattr(settings, "TELEGRAM_BOT_TOKEN", "")
        self.bot_token = (bot_token or "").strip()
        self.timeout = timeout or getattr(settings, "TELEGRAM_HTTP_TIMEOUT", 10)

    def send_message(self, chat_id, text, options=None, context=None):
        """
        Send `text` to `chat_id`.

        options["button"] attaches an inline URL button. `context` is only
        used for log lines (e.g. source, customer id).
        """
        options = options or {}
        log_context = {"chat_id": chat_id, **(context or {})}

        bot = get_bot_instance(self.bot_token)
        if not bot:
            logger.warning(f"Telegram bot token missing, message not sent: {log_context}")
            return

        reply_markup = build_inline_button(options.get("button"))

        try:
            bot.send_message(
                chat_id,
                text,
                reply_markup=reply_markup,
                disable_web_page_preview=options.get("disable_web_page_preview"),
                timeout=self.timeout,
            )
            logger.info(f"Telegram message sent: {log_context}")
        except ApiTelegramException as e:
            logger.warning(
                f"Telegram API error {e.error_code}: {e.description} {log_context}"
            )
        except requests.RequestException as e:
            logger.warning(f"Telegram request failed: {e} {log_context}")
