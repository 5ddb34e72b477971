"""Receipt scanning API."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from fintrack.core.errors import AppError, ValidationFailed
from fintrack.core.utils.decorators import csrf_protected, require_roles
from fintrack.core.utils.results import ServiceResult
from fintrack.domains.finance.mappers import map_receipt
from fintrack.domains.finance.services.receipt_service import scan_receipt
from fintrack.extensions import limiter

receipt_api_bp = Blueprint("finance_receipt_api", __name__)


def _read_upload() -> tuple[bytes, str]:
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise ValidationFailed("file is required")
    mime_type = (upload.mimetype or "").lower()
    if not mime_type.startswith("image/"):
        raise ValidationFailed("file must be an image")
    max_bytes = current_app.config.get("RECEIPT_MAX_BYTES", 5 * 1024 * 1024)
    content = upload.read(max_bytes + 1)
    if not content:
        raise ValidationFailed("file is empty")
    if len(content) > max_bytes:
        raise ValidationFailed("file is too large")
    return content, mime_type


@receipt_api_bp.post("/receipts/scan")
@csrf_protected
@require_roles({"finance:write"})
@limiter.limit("20/minute")
def scan_receipt_endpoint():
    try:
        content, mime_type = _read_upload()
        receipt = scan_receipt(content, mime_type)
    except AppError as exc:
        result = ServiceResult.failure(exc)
        return jsonify(result.to_dict()), result.status
    return jsonify({"ok": True, "data": map_receipt(receipt), "empty": receipt.is_empty}), 200
