"""
SMS Ethiopia gateway client

Every attempt is recorded as an SmsLog row. Validation problems and provider
errors mark the log as failed instead of raising.
"""
import logging
from typing import Optional

import requests
from django.conf import settings
from django.utils import timezone

from accounts.identity import normalize_phone, with_country_code
from .models import SmsLog, SmsPhoneList

logger = logging.getLogger(__name__)

SEND_PATH = '/api/sms/send'


class SmsEthiopiaClient:
    """Sends a single SMS through the SMS Ethiopia HTTP API"""

    def __init__(self, config: Optional[dict] = None):
        config = config if config is not None else getattr(settings, 'SMS_ETHIOPIA', {})
        self.enabled = bool(config.get('enabled'))
        self.base_url = str(config.get('base_url') or '').rstrip('/')
        self.api_key = config.get('key') or ''
        self.timeout = config.get('timeout') or 10

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{SEND_PATH}"

    def _fail(self, log: SmsLog, reason: str, provider_response: str) -> SmsLog:
        log.status = SmsLog.STATUS_FAILED
        log.provider_response = provider_response
        log.sent_at = None
        log.save(update_fields=['status', 'provider_response', 'sent_at', 'updated_at'])
        logger.warning(f"SMS {log.pk} to {log.phone} failed: {reason}")
        return log

    def rejection_reason(self, normalized: str) -> Optional[str]:
        """White/blacklist check for a normalized phone"""
        if SmsPhoneList.objects.filter(
            list_type=SmsPhoneList.LIST_BLACKLIST, normalized_phone=normalized
        ).exists():
            return 'Phone is blacklisted for SMS.'

        whitelist = SmsPhoneList.objects.filter(list_type=SmsPhoneList.LIST_WHITELIST)
        if whitelist.exists() and not whitelist.filter(normalized_phone=normalized).exists():
            return 'Phone not in whitelist while whitelist mode is active.'

        return None

    def send(self, phone: str, message: str, customer=None) -> SmsLog:
        normalized = normalize_phone(phone)
        log = SmsLog.objects.create(
            customer=customer,
            phone=phone,
            message=message,
            status=SmsLog.STATUS_PENDING,
        )
        logger.info(
            f"SMS {log.pk} attempt: customer={getattr(customer, 'pk', None)} "
            f"phone={phone} enabled={self.enabled}"
        )

        if not normalized:
            return self._fail(
                log, 'invalid_phone_format',
                'Invalid Ethiopian phone format. Expected 2519XXXXXXXX / 09XXXXXXXX.'
            )

        rejection = self.rejection_reason(normalized)
        if rejection:
            return self._fail(log, 'phone_list', rejection)

        if not self.enabled:
            return self._fail(log, 'provider_disabled', 'SMS provider disabled in environment.')

        if not self.api_key:
            return self._fail(log, 'missing_api_key', 'Missing SMS_ETHIOPIA_API_KEY.')

        try:
            response = requests.post(
                self.endpoint,
                json={'msisdn': with_country_code(normalized), 'text': message},
                headers={
                    'KEY': self.api_key,
                    'Content-Type': 'application/json',
                    'Accept': 'application/json',
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"SMS {log.pk} request error: {e}")
            return self._fail(log, 'request_exception', str(e))

        if not response.ok:
            return self._fail(log, f'http_{response.status_code}', response.text)

        log.status = SmsLog.STATUS_SENT
        log.provider_response = response.text
        log.sent_at = timezone.now()
        log.save(update_fields=['status', 'provider_response', 'sent_at', 'updated_at'])
        logger.info(f"SMS {log.pk} sent to {with_country_code(normalized)}")
        return log
