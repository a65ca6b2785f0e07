from __future__ import annotations

import json
from dataclasses import replace

import httpx
import pytest

from farmer_api.core.config import get_settings
from farmer_api.core.sms import ConsoleSmsGateway, OnfonSmsGateway, get_sms_gateway
from farmer_api.domain.phones import normalize_phone


@pytest.fixture()
def onfon_settings(monkeypatch):
    monkeypatch.setenv("SMS_BACKEND", "onfon")
    monkeypatch.setenv("ONFON_API_KEY", "key")
    monkeypatch.setenv("ONFON_CLIENT_ID", "client")
    monkeypatch.setenv("ONFON_SENDER_ID", "FARMERS")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0712345678", "254712345678"),
        ("254712345678", "254712345678"),
        ("+254712345678", "254712345678"),
        (" 0712 345 678 ", "254712345678"),
        ("", ""),
    ],
)
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


async def test_onfon_posts_normalized_number(onfon_settings):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ErrorCode": 0})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        gateway = OnfonSmsGateway(onfon_settings, client=client)
        sent = await gateway.send_sms("0712345678", "Your verification code is 123456.")

    assert sent is True
    assert captured["url"] == onfon_settings.onfon_api_url
    body = captured["body"]
    assert body["SenderId"] == "FARMERS"
    assert body["ApiKey"] == "key"
    assert body["ClientId"] == "client"
    assert body["MessageParameters"] == [{"Number": "254712345678", "Text": "Your verification code is 123456."}]


async def test_onfon_reports_provider_rejection(onfon_settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    async with httpx.AsyncClient(transport=transport) as client:
        gateway = OnfonSmsGateway(onfon_settings, client=client)
        assert await gateway.send_sms("0712345678", "hi") is False


async def test_onfon_reports_network_failure(onfon_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        gateway = OnfonSmsGateway(onfon_settings, client=client)
        assert await gateway.send_sms("0712345678", "hi") is False


async def test_onfon_without_credentials_does_not_send(onfon_settings):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    settings = replace(onfon_settings, onfon_api_key="")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        gateway = OnfonSmsGateway(settings, client=client)
        assert await gateway.send_sms("0712345678", "hi") is False
    assert calls == []


async def test_console_gateway_always_delivers():
    assert await ConsoleSmsGateway().send_sms("0712345678", "hi") is True


def test_gateway_factory_follows_backend_setting(onfon_settings):
    assert isinstance(get_sms_gateway(onfon_settings), OnfonSmsGateway)
    assert isinstance(get_sms_gateway(replace(onfon_settings, sms_backend="console")), ConsoleSmsGateway)
