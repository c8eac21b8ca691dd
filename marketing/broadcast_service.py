"""
Broadcast Service for Promo Campaigns

Sends a rendered promo message to every customer in a targeted audience,
over SMS or Telegram, one recipient at a time. Per-recipient failures are
counted and never abort the batch.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounts.identity import display_phone, normalize_telegram_id
from accounts.models import Customer
from bot.notification_service import TelegramBotClient
from orders.models import Order
from organizations.rbac import scope_orders
from .audience import PLATFORM_TELEGRAM, PLATFORMS, build_audience, ordered
from .models import SmsLog, SmsTemplate
from .sms_gateway import SmsEthiopiaClient
from .template_service import SmsTemplateService

logger = logging.getLogger(__name__)

CAMPAIGN_SOURCE = 'staff.sms_campaign'
NO_MATCH_MESSAGE = 'No customers matched the selected promo filters.'
MAX_TEMPLATE_KEY_ATTEMPTS = 100


@dataclass
class CampaignResult:
    """Result of a promo campaign run"""
    platform: str
    sent: int = 0
    failed: int = 0
    audience_size: int = 0
    saved_template_label: Optional[str] = None
    matched: bool = True

    @property
    def channel_label(self) -> str:
        return 'Telegram' if self.platform == PLATFORM_TELEGRAM else 'SMS'

    def summary_message(self) -> str:
        if not self.matched:
            return NO_MATCH_MESSAGE

        message = (
            f"{self.channel_label} promo sent. Sent: {self.sent}, "
            f"Failed: {self.failed}, Audience: {self.audience_size}."
        )
        if self.saved_template_label is not None:
            message += f' Template saved as "{self.saved_template_label}".'
        return message


class CampaignError(Exception):
    """Custom exception for campaign errors"""
    pass


class CampaignDispatcher:
    """
    Service for sending promo campaigns.
    Outbound clients and the clock are injectable for tests and commands.
    """

    def __init__(
        self,
        sms_client: Optional[SmsEthiopiaClient] = None,
        telegram_client: Optional[TelegramBotClient] = None,
        template_service: Optional[SmsTemplateService] = None,
        clock: Optional[Callable] = None,
    ):
        self.sms_client = sms_client or SmsEthiopiaClient()
        self.telegram_client = telegram_client or TelegramBotClient()
        self.template_service = template_service or SmsTemplateService()
        self.clock = clock or timezone.now

    def send_campaign(self, actor, spec, message: str, options: Optional[dict] = None) -> CampaignResult:
        """
        Render and send `message` to the audience matched by `spec`.

        Raises AudienceRangeError (nothing sent) on an inverted range and
        CampaignError on an unknown platform or an empty message.
        """
        options = options or {}
        platform = spec.platform
        if platform not in PLATFORMS:
            raise CampaignError(f"Unknown campaign platform: {platform}")
        if not (message or '').strip():
            raise CampaignError("Campaign message is required")

        now = self.clock()
        audience = build_audience(actor, spec, now=now)

        customer_ids = list(dict.fromkeys(ordered(audience).values_list('pk', flat=True)))

        result = CampaignResult(platform=platform, audience_size=len(customer_ids))
        if not customer_ids:
            result.matched = False
            logger.info(f"Promo campaign by user {getattr(actor, 'pk', None)} matched no customers")
            return result

        logger.info(
            f"Starting {platform} promo campaign by user {getattr(actor, 'pk', None)} "
            f"for {len(customer_ids)} customers"
        )

        customers = Customer.objects.in_bulk(customer_ids)
        scoped_orders = scope_orders(Order.objects.all(), actor)
        button = {
            'text': str(options.get('telegram_button_text') or '').strip(),
            'url': str(options.get('telegram_button_url') or '').strip(),
        }

        for customer_id in customer_ids:
            customer = customers.get(customer_id)
            if customer is None:
                result.failed += 1
                logger.warning(f"Customer {customer_id} disappeared before the promo was sent")
                continue

            rendered = self.render_for(customer, message, scoped_orders)

            if platform == PLATFORM_TELEGRAM:
                delivered = self.send_telegram(customer, rendered, button)
            else:
                delivered = self.send_sms(customer, rendered)

            if delivered:
                result.sent += 1
            else:
                result.failed += 1

        if options.get('save_template'):
            template = self.save_template(message, options.get('template_label'), now)
            result.saved_template_label = template.label

        logger.info(
            f"Promo campaign finished: sent={result.sent} failed={result.failed} "
            f"audience={result.audience_size}"
        )
        return result

    def render_for(self, customer, message, scoped_orders) -> str:
        customer_orders = scoped_orders.filter(customer=customer)
        latest_order = self.template_service.resolve_recent_order(customer_orders)
        variables = self.template_service.variables_for_customer(
            customer, latest_order, orders=customer_orders
        )
        return self.template_service.render(message, variables)

    def send_telegram(self, customer, text, button) -> bool:
        chat_id = normalize_telegram_id(customer.telegram_id)
        if chat_id is None:
            logger.warning(f"Customer {customer.pk} has no valid Telegram id")
            return False

        options = {}
        if button['text'] and button['url']:
            options['button'] = button

        self.telegram_client.send_message(chat_id, text, options, {
            'source': CAMPAIGN_SOURCE,
            'customer_id': customer.pk,
            'customer_name': customer.name,
            'customer_telegram_id': str(customer.telegram_id) if customer.telegram_id is not None else None,
        })
        # Delivery is not confirmed by the Telegram client
        return True

    def send_sms(self, customer, text) -> bool:
        phone = display_phone(customer.phone)
        if not phone:
            logger.warning(f"Customer {customer.pk} has no phone for SMS")
            return False

        log = self.sms_client.send(phone, text, customer)
        return log.status == SmsLog.STATUS_SENT

    def save_template(self, body, label=None, now=None) -> SmsTemplate:
        """
        Store the campaign message as an active template.
        Key is promo_<YYYYMMDD_HHMMSS>, with a _<n> suffix on collision.
        """
        now = timezone.localtime(now or self.clock())
        label = (label or '').strip() or f"Promo Campaign {now:%Y-%m-%d %H:%M}"
        base_key = f"promo_{now:%Y%m%d_%H%M%S}"

        for suffix in range(MAX_TEMPLATE_KEY_ATTEMPTS):
            key = base_key if suffix == 0 else f"{base_key}_{suffix}"
            try:
                with transaction.atomic():
                    template = SmsTemplate.objects.create(
                        key=key, label=label, body=body, is_active=True
                    )
            except IntegrityError:
                continue
            logger.info(f"Saved promo template {key} ({label})")
            return template

        raise CampaignError(f"Could not allocate a template key for {base_key}")


def send_campaign(actor, spec, message, options=None, **kwargs) -> CampaignResult:
    """Shortcut: send with the default SMS / Telegram clients"""
    return CampaignDispatcher(**kwargs).send_campaign(actor, spec, message, options)
