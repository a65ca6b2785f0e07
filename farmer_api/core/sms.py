"""
SMS adapter for the farmer registration backend.

The production implementation posts to the Onfon Media bulk SMS API using the
credentials from Settings; the console backend only logs the message.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from farmer_api.domain.phones import normalize_phone

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


class SmsGateway(Protocol):
    async def send_sms(self, phone_number: str, message: str) -> bool:
        ...


class ConsoleSmsGateway:
    """Development backend: writes messages to the log and reports success."""

    async def send_sms(self, phone_number: str, message: str) -> bool:
        logger.info("[sms] to=%s body=%s", normalize_phone(phone_number), message)
        return True


class OnfonSmsGateway:
    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None) -> None:
        self.settings = settings or get_settings()
        self._client = client

    def _configured(self) -> bool:
        s = self.settings
        return bool(s.onfon_api_url and s.onfon_api_key and s.onfon_client_id and s.onfon_sender_id)

    def _payload(self, phone_number: str, message: str) -> dict:
        return {
            "SenderId": self.settings.onfon_sender_id,
            "IsUnicode": True,
            "IsFlash": True,
            "MessageParameters": [{"Number": normalize_phone(phone_number), "Text": message}],
            "ApiKey": self.settings.onfon_api_key,
            "ClientId": self.settings.onfon_client_id,
        }

    async def send_sms(self, phone_number: str, message: str) -> bool:
        """
        Deliver a single SMS. Returns False when the provider is not configured,
        answers with a non-200 status or cannot be reached.
        """
        if not self._configured():
            logger.warning("[sms] Onfon configuration missing; skipping send.")
            return False
        payload = self._payload(phone_number, message)
        try:
            if self._client is not None:
                response = await self._client.post(self.settings.onfon_api_url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.settings.sms_timeout_seconds) as client:
                    response = await client.post(self.settings.onfon_api_url, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("[sms] delivery to %s failed: %s", normalize_phone(phone_number), exc)
            return False
        if response.status_code != 200:
            logger.warning(
                "[sms] provider rejected message to %s: status=%s body=%s",
                normalize_phone(phone_number),
                response.status_code,
                response.text[:200],
            )
            return False
        return True


def get_sms_gateway(settings: Optional[Settings] = None) -> SmsGateway:
    settings = settings or get_settings()
    if settings.sms_backend == "onfon":
        return OnfonSmsGateway(settings)
    return ConsoleSmsGateway()
