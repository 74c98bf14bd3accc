import json
import logging
from urllib.parse import parse_qs

import httpx

from fastfab.config import Settings
from fastfab.infrastructure.messaging.gupshup_dispatcher import (
    GupshupDispatcher,
    LoggingDispatcher,
    build_dispatcher,
)

API_URL = "https://api.gupshup.io/wa/api/v1/template/msg"


def make_dispatcher(handler, source_name="FastFab"):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return GupshupDispatcher(
        api_url=API_URL,
        api_key="test-key",
        source_number="917834811114",
        template_id="tpl-otp",
        source_name=source_name,
        client=client,
    )


def test_send_otp_posts_template_form():
    captured = {}

    def handler(request):
        captured["request"] = request
        return httpx.Response(202, json={"status": "submitted", "messageId": "m-1"})

    result = make_dispatcher(handler).send_otp("+919876543210", "482913")

    assert result.delivered is True
    assert result.mock is False
    request = captured["request"]
    assert request.method == "POST"
    assert str(request.url) == API_URL
    assert request.headers["apikey"] == "test-key"
    assert request.headers["cache-control"] == "no-cache"
    form = parse_qs(request.content.decode())
    assert form["source"] == ["917834811114"]
    assert form["source.name"] == ["FastFab"]
    assert form["destination"] == ["919876543210"]
    assert json.loads(form["template"][0]) == {"id": "tpl-otp", "params": ["482913"]}


def test_source_name_is_optional():
    captured = {}

    def handler(request):
        captured["form"] = parse_qs(request.content.decode())
        return httpx.Response(200)

    make_dispatcher(handler, source_name=None).send_otp("+919876543210", "482913")
    assert "source.name" not in captured["form"]


def test_provider_rejection_is_reported():
    def handler(request):
        return httpx.Response(401, text='{"status":"error","message":"Invalid API key"}')

    result = make_dispatcher(handler).send_otp("+919876543210", "482913")

    assert result.delivered is False
    assert result.code == "GUPSHUP_ERROR"
    assert "Invalid API key" in result.error


def test_network_failure_is_reported():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = make_dispatcher(handler).send_otp("+919876543210", "482913")

    assert result.delivered is False
    assert result.code == "GUPSHUP_REQUEST_FAILED"
    assert "connection refused" in result.error


def test_logging_dispatcher_is_a_successful_mock():
    result = LoggingDispatcher().send_otp("+919876543210", "482913")
    assert result.delivered is True
    assert result.mock is True


def test_logging_dispatcher_hides_the_code_by_default(caplog):
    with caplog.at_level(logging.WARNING):
        LoggingDispatcher().send_otp("+919876543210", "482913")
    assert "482913" not in caplog.text
    assert "***3210" in caplog.text


def test_logging_dispatcher_reveals_the_code_when_asked(caplog):
    with caplog.at_level(logging.WARNING):
        LoggingDispatcher(reveal_codes=True).send_otp("+919876543210", "482913")
    assert "[MOCK] Would send OTP 482913 to +919876543210" in caplog.text


def test_fallback_dispatcher_reveals_codes_only_in_development():
    blank = dict(_env_file=None, GUPSHUP_API_KEY="", GUPSHUP_SOURCE_NUMBER="", GUPSHUP_TEMPLATE_ID="")
    assert build_dispatcher(Settings(ENV="development", **blank)).reveal_codes is True
    assert build_dispatcher(Settings(ENV="production", **blank)).reveal_codes is False


def test_build_dispatcher_falls_back_without_credentials():
    settings = Settings(_env_file=None, GUPSHUP_API_KEY="", GUPSHUP_SOURCE_NUMBER="", GUPSHUP_TEMPLATE_ID="")
    assert isinstance(build_dispatcher(settings), LoggingDispatcher)


def test_build_dispatcher_uses_gupshup_when_configured():
    settings = Settings(
        _env_file=None,
        GUPSHUP_API_KEY="key",
        GUPSHUP_SOURCE_NUMBER="917834811114",
        GUPSHUP_TEMPLATE_ID="tpl-otp",
        GUPSHUP_SRC_NAME="",
    )
    dispatcher = build_dispatcher(settings)
    assert isinstance(dispatcher, GupshupDispatcher)
    assert dispatcher.source_name is None
    assert dispatcher.api_url == "https://api.gupshup.io/wa/api/v1/msg"
