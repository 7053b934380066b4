"""Tests for the HTTP status client."""

import base64

import httpx
import pytest

from wa_bridge.tools.status_tools import fetch_chats, fetch_health, fetch_qr, main, save_qr_png

BASE_URL = "http://bridge.test"


def transport_for(routes):
    def handler(request: httpx.Request) -> httpx.Response:
        status, body = routes[request.url.path]
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler)


class TestFetchers:

    @pytest.mark.asyncio
    async def test_health(self):
        body = {"ok": True, "ready": True, "authenticated": True, "auth_failure": None}
        transport = transport_for({"/health": (200, body)})
        assert await fetch_health(base_url=BASE_URL, transport=transport) == body

    @pytest.mark.asyncio
    async def test_chats_error_is_mapped(self):
        transport = transport_for({"/chats": (500, {"error": "WhatsApp client is not ready."})})
        result = await fetch_chats(base_url=BASE_URL, transport=transport)
        assert result == {"error": "WhatsApp client is not ready."}

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        result = await fetch_qr(base_url=BASE_URL, transport=httpx.MockTransport(handler))
        assert result == {"error": "HTTP 502"}

    @pytest.mark.asyncio
    async def test_non_object_error_body(self):
        transport = transport_for({"/chats": (500, ["unexpected", "list"])})
        result = await fetch_chats(base_url=BASE_URL, transport=transport)
        assert result == {"error": "HTTP 500"}

    @pytest.mark.asyncio
    async def test_connect_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        result = await fetch_health(base_url=BASE_URL, transport=httpx.MockTransport(handler))
        assert "not reachable" in result["error"]


class TestSaveQr:

    def test_writes_png_bytes(self, tmp_path):
        payload = b"\x89PNG\r\n\x1a\nfake"
        data_url = "data:image/png;base64," + base64.b64encode(payload).decode()
        out = save_qr_png(data_url, tmp_path / "qr.png")
        assert out.read_bytes() == payload

    def test_rejects_non_png(self, tmp_path):
        with pytest.raises(ValueError):
            save_qr_png("", tmp_path / "qr.png")


def test_cli_reports_unreachable_bridge(capsys):
    assert main(["--url", "http://127.0.0.1:9", "health"]) == 1
    assert "Error:" in capsys.readouterr().err
