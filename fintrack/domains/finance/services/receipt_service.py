"""Receipt scanning through the Gemini generateContent REST endpoint."""

from __future__ import annotations

import base64
import json
import logging
import re
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol

import requests
from dateutil import parser as date_parser
from flask import current_app

from fintrack.domains.finance.errors import ExtractionFailed
from fintrack.domains.finance.schemas.finance_schemas import ReceiptData

logger = logging.getLogger(__name__)

RECEIPT_PROMPT = """
Analyze this receipt image and extract the following information in JSON:
{
  "amount": number,
  "date": "ISO string",
  "description": "string",
  "merchantName": "string",
  "category": "string"
}
If not a receipt, return {}
"""

_FENCE_RE = re.compile(r"```(?:json)?")


class ReceiptExtractor(Protocol):
    def extract(self, image_bytes: bytes, mime_type: str) -> Dict[str, Any]:
        ...


class GeminiReceiptExtractor:
    """Sends the image inline with an extraction prompt and returns the decoded JSON object."""

    def __init__(self, api_key: str, model: str, api_url: str, timeout: float = 30) -> None:
        self.api_key = api_key
        self.model = model
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_app(cls, app=None) -> "GeminiReceiptExtractor":
        cfg = (app or current_app).config
        return cls(
            api_key=cfg.get("GEMINI_API_KEY", ""),
            model=cfg.get("GEMINI_MODEL", "gemini-1.5-flash"),
            api_url=cfg.get("GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta/models"),
            timeout=cfg.get("RECEIPT_SCAN_TIMEOUT_SECONDS", 30),
        )

    def extract(self, image_bytes: bytes, mime_type: str) -> Dict[str, Any]:
        body = {
            "contents": [
                {
                    "parts": [
                        {
                            "inline_data": {
                                "mime_type": mime_type,
                                "data": base64.b64encode(image_bytes).decode("ascii"),
                            }
                        },
                        {"text": RECEIPT_PROMPT},
                    ]
                }
            ]
        }
        resp = requests.post(
            f"{self.api_url}/{self.model}:generateContent",
            params={"key": self.api_key},
            json=body,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        text = resp.json()["candidates"][0]["content"]["parts"][0]["text"]
        data = json.loads(_FENCE_RE.sub("", text).strip())
        if not isinstance(data, dict):
            raise ValueError("receipt response is not a JSON object")
        return data


def _to_receipt(data: Dict[str, Any]) -> ReceiptData:
    if not data:
        return ReceiptData()
    amount = data.get("amount")
    raw_date = data.get("date")
    return ReceiptData(
        amount=Decimal(str(amount)) if amount not in (None, "") else None,
        date=date_parser.isoparse(raw_date).date() if raw_date else None,
        description=data.get("description") or None,
        category=data.get("category") or None,
        merchant_name=data.get("merchantName") or data.get("merchant_name") or None,
    )


def scan_receipt(
    image_bytes: bytes, mime_type: str, extractor: Optional[ReceiptExtractor] = None
) -> ReceiptData:
    """Return best-effort receipt fields; any failure becomes ExtractionFailed."""
    extractor = extractor or GeminiReceiptExtractor.from_app()
    try:
        return _to_receipt(extractor.extract(image_bytes, mime_type))
    except Exception as exc:
        logger.warning("Receipt scan failed: %s", exc)
        raise ExtractionFailed() from exc
