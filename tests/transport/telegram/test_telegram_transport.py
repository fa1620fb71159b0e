"""
Telegram Transport Tests

  - sendMessage / sendVoice request shape
  - Delivery failures reported as False
  - setWebhook with certificate upload
"""

from unittest.mock import patch, MagicMock

import httpx
import pytest

from transport.telegram import TelegramTransport, WebhookRegistrationError

BOT_TOKEN = "123:abc"


def transport_with(handler) -> TelegramTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TelegramTransport(token=BOT_TOKEN, timeout_s=5, client=client)


class TestInitialization:
    """Token handling."""

    def test_api_url_contains_token(self):
        transport = TelegramTransport(token=BOT_TOKEN)

        assert transport.api_url == "https://api.telegram.org/bot123:abc"

    def test_missing_token(self):
        with patch("transport.telegram.transport.Config.BOT_TOKEN", ""):
            with pytest.raises(ValueError, match="BOT_TOKEN"):
                TelegramTransport()


class TestSendText:
    """sendMessage"""

    @pytest.mark.asyncio
    async def test_send_text_posts_json(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = request.content
            return httpx.Response(200, json={"ok": True})

        sent = await transport_with(handler).send_text(42, "Sorry")

        assert sent is True
        assert seen["path"] == "/bot123:abc/sendMessage"
        assert b'"chat_id":42' in seen["body"].replace(b" ", b"")
        assert b"Sorry" in seen["body"]

    @pytest.mark.asyncio
    async def test_long_text_is_truncated(self):
        seen = {}

        def handler(request):
            import json
            seen["text"] = json.loads(request.content)["text"]
            return httpx.Response(200, json={"ok": True})

        await transport_with(handler).send_text(42, "x" * 5000)

        assert len(seen["text"]) <= 4096

    @pytest.mark.asyncio
    async def test_non_200_returns_false(self):
        def handler(request):
            return httpx.Response(400, json={"ok": False, "description": "chat not found"})

        assert await transport_with(handler).send_text(42, "hi") is False

    @pytest.mark.asyncio
    async def test_network_error_returns_false(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        assert await transport_with(handler).send_text(42, "hi") is False


class TestSendAudio:
    """sendVoice multipart upload"""

    @pytest.mark.asyncio
    async def test_send_audio_uploads_named_file(self, wav_bytes):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["content_type"] = request.headers["Content-Type"]
            seen["body"] = request.content
            return httpx.Response(200, json={"ok": True})

        sent = await transport_with(handler).send_audio(42, wav_bytes)

        assert sent is True
        assert seen["path"] == "/bot123:abc/sendVoice"
        assert seen["content_type"].startswith("multipart/form-data")
        assert b'name="chat_id"' in seen["body"]
        assert b'name="voice"; filename="voice.wav"' in seen["body"]
        assert wav_bytes in seen["body"]

    @pytest.mark.asyncio
    async def test_send_audio_failure_returns_false(self, wav_bytes):
        def handler(request):
            return httpx.Response(413, text="Request Entity Too Large")

        assert await transport_with(handler).send_audio(42, wav_bytes) is False


class TestSetWebhook:
    """setWebhook registration"""

    def test_uploads_certificate_and_url(self, tmp_path):
        cert = tmp_path / "cert.pem"
        cert.write_bytes(b"-----BEGIN CERTIFICATE-----")
        response = MagicMock(status_code=200)
        response.json.return_value = {"ok": True, "result": True}

        with patch("transport.telegram.transport.requests.post", return_value=response) as post:
            result = TelegramTransport(token=BOT_TOKEN).set_webhook(
                "https://bot.example.com:8443/webhook", str(cert)
            )

        assert result == {"ok": True, "result": True}
        args, kwargs = post.call_args
        assert args[0] == "https://api.telegram.org/bot123:abc/setWebhook"
        assert kwargs["data"] == {"url": "https://bot.example.com:8443/webhook"}
        assert kwargs["files"]["certificate"][0] == "cert.pem"

    def test_without_certificate(self):
        response = MagicMock(status_code=200)
        response.json.return_value = {"ok": True}

        with patch("transport.telegram.transport.requests.post", return_value=response) as post:
            TelegramTransport(token=BOT_TOKEN).set_webhook("https://bot.example.com/webhook")

        assert "files" not in post.call_args.kwargs

    def test_rejected_registration_raises(self):
        response = MagicMock(status_code=400, text="bad webhook: HTTPS url must be provided")

        with patch("transport.telegram.transport.requests.post", return_value=response):
            with pytest.raises(WebhookRegistrationError, match="400"):
                TelegramTransport(token=BOT_TOKEN).set_webhook("http://insecure")

    def test_non_json_success_body_raises(self):
        """A 200 from a proxy error page is still a failed registration."""
        response = MagicMock(status_code=200, text="<html>502 Bad Gateway</html>")
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")

        with patch("transport.telegram.transport.requests.post", return_value=response):
            with pytest.raises(WebhookRegistrationError, match="unreadable"):
                TelegramTransport(token=BOT_TOKEN).set_webhook("https://bot.example.com/webhook")

    def test_missing_certificate_raises(self, tmp_path):
        with pytest.raises(WebhookRegistrationError):
            TelegramTransport(token=BOT_TOKEN).set_webhook(
                "https://bot.example.com/webhook", str(tmp_path / "missing.pem")
            )
