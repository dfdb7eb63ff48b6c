"""
Tests for RPC, functions and storage surfaces.
"""

import asyncio
import io

import pytest
from pydantic import ValidationError

from conftest import BASE_URL, request_json
from flaskbase.models import Result
from flaskbase.rpc import (
    ChatRouterRequest,
    chat_router,
    contact_support,
    reset_monthly_credits,
    reset_monthly_ocr_credits,
)


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class TestRpc:
    def test_rpc_posts_params(self, fake_api, make_client):
        fake_api.add("POST", "/rpc/increment", (200, {"value": 2}))
        result = _run(make_client().rpc("increment", {"by": 1}))

        assert result == Result(data={"value": 2}, error=None)
        assert request_json(fake_api.requests[0]) == {"by": 1}

    def test_rpc_defaults_to_empty_object(self, fake_api, make_client):
        fake_api.add("POST", "/rpc/reset_monthly_credits", (200, {"v1": 10, "v2": 5, "v3": 1}))
        result = _run(reset_monthly_credits(make_client()))

        assert result.data == {"v1": 10, "v2": 5, "v3": 1}
        assert request_json(fake_api.requests[0]) == {}

    def test_reset_ocr_credits(self, fake_api, make_client):
        fake_api.add("POST", "/rpc/reset_monthly_ocr_credits", (200, {"ocr_bill": 20, "ocr_bank": 20}))
        assert _run(reset_monthly_ocr_credits(make_client())).data == {"ocr_bill": 20, "ocr_bank": 20}

    def test_rpc_error(self, fake_api, make_client):
        fake_api.add("POST", "/rpc/missing", (404, {"error": "unknown function"}))
        assert _run(make_client().rpc("missing")) == Result(data=None, error="unknown function")


class TestFunctions:
    def test_invoke(self, fake_api, make_client):
        fake_api.add("POST", "/functions/echo", (200, {"ok": True}))
        result = _run(make_client().functions.invoke("echo", body={"x": 1}))

        assert result.data == {"ok": True}
        assert request_json(fake_api.requests[0]) == {"x": 1}

    def test_chat_router_uses_camel_case(self, fake_api, make_client):
        fake_api.add("POST", "/functions/chat-router", (200, {"assistant": {"text": "hi"}, "credits": {"v1": 9}}))

        result = _run(
            chat_router(make_client(), "regenerate", "V2", chat_id="c1", last_user_text="hello")
        )

        assert result.data["assistant"] == {"text": "hi"}
        assert request_json(fake_api.requests[0]) == {
            "action": "regenerate",
            "version": "V2",
            "chatId": "c1",
            "lastUserText": "hello",
        }

    def test_chat_router_rejects_unknown_version(self):
        with pytest.raises(ValidationError):
            ChatRouterRequest(action="send", version="V9")

    def test_contact_support(self, fake_api, make_client):
        fake_api.add("POST", "/functions/contact-support", (200, {"ok": True}))
        _run(contact_support(make_client(), "Billing", "Charged twice"))
        assert request_json(fake_api.requests[0]) == {"subject": "Billing", "message": "Charged twice"}


class TestStorage:
    def test_upload_bytes(self, fake_api, make_client):
        fake_api.add(
            "POST",
            "/storage/receipts/upload",
            (200, {"path": "u1/bill.pdf", "publicUrl": f"{BASE_URL}/storage/receipts/public/u1%2Fbill.pdf"}),
        )

        result = _run(make_client().storage.from_("receipts").upload("u1/bill.pdf", b"%PDF-1.4"))

        assert result.data["path"] == "u1/bill.pdf"
        (request,) = fake_api.requests
        assert request.headers["content-type"].startswith("multipart/form-data")
        body = request.content
        assert b'name="path"' in body
        assert b"u1/bill.pdf" in body
        assert b'name="file"; filename="bill.pdf"' in body
        assert b"%PDF-1.4" in body

    def test_upload_file_object(self, fake_api, make_client):
        fake_api.add("POST", "/storage/receipts/upload", (200, {"path": "x.png"}))
        handle = io.BytesIO(b"png-bytes")

        _run(make_client().storage.from_("receipts").upload("x.png", handle))

        assert b"png-bytes" in fake_api.requests[0].content

    def test_upload_path(self, fake_api, make_client, tmp_path):
        source = tmp_path / "scan.jpg"
        source.write_bytes(b"jpeg-bytes")
        fake_api.add("POST", "/storage/receipts/upload", (200, {"path": "scans/scan.jpg"}))

        _run(make_client().storage.from_("receipts").upload("scans/scan.jpg", source))

        content = fake_api.requests[0].content
        assert b'filename="scan.jpg"' in content
        assert b"jpeg-bytes" in content

    def test_upload_error(self, fake_api, make_client):
        fake_api.add("POST", "/storage/receipts/upload", (413, {"error": "file too large"}))
        result = _run(make_client().storage.from_("receipts").upload("big.pdf", b"0" * 10))
        assert result == Result(data=None, error="file too large")

    def test_public_url_is_local(self, fake_api, make_client):
        result = make_client().storage.from_("receipts").get_public_url("u1/bill 1.pdf")

        assert result == Result(
            data={"publicUrl": f"{BASE_URL}/storage/receipts/public/u1%2Fbill%201.pdf"},
            error=None,
        )
        assert fake_api.requests == []

    def test_public_url_keeps_uri_sub_delims(self, make_client):
        result = make_client().storage.from_("receipts").get_public_url("scans/it's (1)!*.png")

        assert result.data["publicUrl"] == f"{BASE_URL}/storage/receipts/public/scans%2Fit's%20(1)!*.png"
