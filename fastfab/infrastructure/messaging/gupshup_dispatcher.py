"""
Gupshup WhatsApp dispatch

Sends OTP codes through a pre-approved Gupshup WhatsApp template. When the
provider credentials are absent a logging stand-in is used instead so local
development works without a live account.
"""

import json
import logging
from typing import Optional

import httpx

from ...config import Settings
from ...application.ports.message_dispatcher import MessageDispatcher, DispatchResult

logger = logging.getLogger(__name__)


class GupshupDispatcher(MessageDispatcher):
    def __init__(
        self,
        api_url: str,
        api_key: str,
        source_number: str,
        template_id: str,
        source_name: Optional[str] = None,
        timeout: float = 15.0,
        client: Optional[httpx.Client] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.source_number = source_number
        self.template_id = template_id
        self.source_name = source_name
        self.client = client or httpx.Client(timeout=timeout)

    def __repr__(self):
        return f"<GupshupDispatcher url={self.api_url} source={self.source_number}>"

    def _form(self, phone_number: str, code: str) -> dict:
        form = {"source": self.source_number}
        if self.source_name:
            form["source.name"] = self.source_name
        # Gupshup expects the destination without the leading "+"
        form["destination"] = phone_number[1:] if phone_number.startswith("+") else phone_number
        form["template"] = json.dumps({"id": self.template_id, "params": [code]})
        return form

    def send_otp(self, phone_number: str, code: str) -> DispatchResult:
        headers = {
            "Cache-Control": "no-cache",
            "apikey": self.api_key,
        }
        try:
            response = self.client.post(self.api_url, data=self._form(phone_number, code), headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Gupshup request failed: {e}")
            return DispatchResult(delivered=False, error=str(e) or type(e).__name__, code="GUPSHUP_REQUEST_FAILED")

        if 200 <= response.status_code < 300:
            logger.info(f"Gupshup accepted OTP message, status {response.status_code}")
            return DispatchResult(delivered=True)

        logger.error(f"Gupshup returned status {response.status_code}: {response.text}")
        return DispatchResult(
            delivered=False,
            error=response.text or f"HTTP {response.status_code}",
            code="GUPSHUP_ERROR",
        )


class LoggingDispatcher(MessageDispatcher):
    """Stand-in used when Gupshup credentials are not configured.

    With reveal_codes set (development only) the code itself is logged so a
    local login can be completed by reading it off the console.
    """

    def __init__(self, reveal_codes: bool = False):
        self.reveal_codes = reveal_codes

    def send_otp(self, phone_number: str, code: str) -> DispatchResult:
        if self.reveal_codes:
            logger.warning(f"[MOCK] Would send OTP {code} to {phone_number}")
        else:
            logger.warning(f"[MOCK] Gupshup not configured; WhatsApp OTP for ***{phone_number[-4:]} not sent")
        return DispatchResult(delivered=True, mock=True)


def build_dispatcher(settings: Settings) -> MessageDispatcher:
    if not settings.gupshup_configured:
        return LoggingDispatcher(reveal_codes=settings.is_development)
    return GupshupDispatcher(
        api_url=settings.GUPSHUP_API_URL,
        api_key=settings.GUPSHUP_API_KEY,
        source_number=settings.GUPSHUP_SOURCE_NUMBER,
        template_id=settings.GUPSHUP_TEMPLATE_ID,
        source_name=settings.GUPSHUP_SRC_NAME or None,
        timeout=settings.GUPSHUP_TIMEOUT_SECONDS,
    )
