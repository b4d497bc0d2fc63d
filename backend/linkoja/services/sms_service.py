import logging
import re

import requests

from ..core.settings import Settings

logger = logging.getLogger(__name__)


class SmsService:
    """Termii SMS gateway client. Best-effort: never raises to the caller."""

    def __init__(self, settings: Settings, session: requests.Session = None):
        self.settings = settings
        self.session = session or requests.Session()

    def format_phone_number(self, phone_number: str) -> str:
        """Strip separators and make sure the number carries a country code."""
        phone = re.sub(r"[\s\-()]", "", phone_number)
        country_code = self.settings.sms_default_country_code
        if phone.startswith("+"):
            return phone
        if phone.startswith("0"):
            return f"+{country_code}{phone[1:]}"
        if phone.startswith(country_code):
            return f"+{phone}"
        return f"+{country_code}{phone}"

    def send_sms(self, phone_number: str, message: str) -> bool:
        if not self.settings.sms_enabled:
            logger.warning(f"SMS delivery disabled; message to {phone_number} not sent")
            return False

        payload = {
            "to": self.format_phone_number(phone_number),
            "from": self.settings.termii_sender_id,
            "sms": message,
            "type": "plain",
            "channel": self.settings.termii_channel,
            "api_key": self.settings.termii_api_key,
        }

        try:
            response = self.session.post(self.settings.termii_api_url, json=payload, timeout=10)
        except requests.RequestException as e:
            logger.error(f"Exception occurred while sending SMS to {phone_number}: {e}")
            return False

        if response.ok:
            logger.info(f"SMS sent successfully to {phone_number}")
            return True

        logger.error(f"Failed to send SMS to {phone_number}. Status: {response.status_code}, Response: {response.text}")
        return False
