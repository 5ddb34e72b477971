from __future__ import annotations

import datetime as dt
import io
from decimal import Decimal
from unittest import mock

import pytest
import requests

from fintrack.domains.finance.errors import ExtractionFailed
from fintrack.domains.finance.services import receipt_service
from fintrack.domains.finance.services.receipt_service import GeminiReceiptExtractor, scan_receipt


class _FakeResponse:
    def __init__(self, text: str, status_code: int = 200):
        self.status_code = status_code
        self._text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return {"candidates": [{"content": {"parts": [{"text": self._text}]}}]}


def _extractor() -> GeminiReceiptExtractor:
    return GeminiReceiptExtractor(api_key="k", model="gemini-1.5-flash", api_url="https://example.test/models")


@pytest.mark.unit
def test_fenced_json_is_parsed(monkeypatch):
    reply = '```json\n{"amount": 42.5, "date": "2024-03-09T00:00:00Z", "description": "Lunch", "merchantName": "Cafe", "category": "food"}\n```'
    post = mock.Mock(return_value=_FakeResponse(reply))
    monkeypatch.setattr(receipt_service.requests, "post", post)

    receipt = scan_receipt(b"\x89PNG", "image/png", extractor=_extractor())

    assert receipt.amount == Decimal("42.5")
    assert receipt.date == dt.date(2024, 3, 9)
    assert receipt.merchant_name == "Cafe"
    assert receipt.category == "food"
    url = post.call_args.args[0]
    assert url == "https://example.test/models/gemini-1.5-flash:generateContent"
    body = post.call_args.kwargs["json"]
    inline = body["contents"][0]["parts"][0]["inline_data"]
    assert inline == {"mime_type": "image/png", "data": "iVBORw=="}


@pytest.mark.unit
def test_empty_object_means_not_a_receipt(monkeypatch):
    monkeypatch.setattr(receipt_service.requests, "post", mock.Mock(return_value=_FakeResponse("{}")))

    receipt = scan_receipt(b"img", "image/jpeg", extractor=_extractor())

    assert receipt.is_empty


@pytest.mark.unit
@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse("not json at all"),
        _FakeResponse('{"amount": 1}', status_code=500),
        _FakeResponse('{"amount": "lots"}'),
        _FakeResponse("[1, 2]"),
    ],
)
def test_failures_collapse_to_extraction_failed(monkeypatch, response):
    monkeypatch.setattr(receipt_service.requests, "post", mock.Mock(return_value=response))

    with pytest.raises(ExtractionFailed) as excinfo:
        scan_receipt(b"img", "image/jpeg", extractor=_extractor())

    assert excinfo.value.message == "Failed to scan receipt"


@pytest.mark.unit
def test_transport_errors_collapse_to_extraction_failed(monkeypatch):
    monkeypatch.setattr(receipt_service.requests, "post", mock.Mock(side_effect=requests.Timeout("slow")))

    with pytest.raises(ExtractionFailed):
        scan_receipt(b"img", "image/jpeg", extractor=_extractor())


@pytest.mark.integration
def test_scan_endpoint_returns_fields(client, auth_headers, monkeypatch):
    reply = '{"amount": 9.99, "date": "2024-02-01", "description": "Coffee", "merchantName": "Bean", "category": "food"}'
    post = mock.Mock(return_value=_FakeResponse(reply))
    monkeypatch.setattr(receipt_service.requests, "post", post)

    resp = client.post(
        "/api/finance/receipts/scan",
        data={"file": (io.BytesIO(b"fake-image"), "receipt.png", "image/png")},
        headers=auth_headers,
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["data"] == {
        "amount": 9.99,
        "date": "2024-02-01",
        "description": "Coffee",
        "category": "food",
        "merchant_name": "Bean",
    }
    assert body["empty"] is False
    assert post.call_args.kwargs["params"] == {"key": "test-key"}


@pytest.mark.integration
def test_scan_endpoint_rejects_non_images(client, auth_headers):
    resp = client.post(
        "/api/finance/receipts/scan",
        data={"file": (io.BytesIO(b"%PDF"), "receipt.pdf", "application/pdf")},
        headers=auth_headers,
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


@pytest.mark.integration
def test_scan_endpoint_maps_extraction_failure(client, auth_headers, monkeypatch):
    monkeypatch.setattr(receipt_service.requests, "post", mock.Mock(return_value=_FakeResponse("garbage")))

    resp = client.post(
        "/api/finance/receipts/scan",
        data={"file": (io.BytesIO(b"fake-image"), "receipt.jpg", "image/jpeg")},
        headers=auth_headers,
        content_type="multipart/form-data",
    )

    assert resp.status_code == 502
    assert resp.get_json() == {"ok": False, "error": "extraction_failed", "message": "Failed to scan receipt"}
