"""
Masking helpers. Phone numbers, verification codes and ciphertexts go
through these before they reach a log line.
"""

import copy
import json
import re
from typing import Any, Dict, Optional

MASK = "****"

# Standalone 4-8 digit runs, i.e. anything that looks like a one-time code
_CODE_PATTERN = re.compile(r"\b\d{4,8}\b", re.ASCII)


def mask_phone_number(phone: Optional[str]) -> str:
    """
    Keep the first and last three characters, star out the rest.
    "+4915112345678" -> "+49********678"
    """
    if not phone or len(phone) < 4:
        return MASK

    head = phone[:3]
    tail = phone[max(3, len(phone) - 3):]
    return head + "*" * (len(phone) - len(head) - len(tail)) + tail


def mask_code(text: Optional[str]) -> str:
    if not text:
        return ""
    return _CODE_PATTERN.sub(MASK, text)


def contains_unicode(text: str) -> bool:
    return any(ord(ch) > 127 for ch in text)


def mask_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Copy of a Cognito event that is safe to dump in debug logs.
    """
    masked = copy.deepcopy(event)
    request = masked.get("request")
    if not isinstance(request, dict):
        return masked

    code = request.get("code")
    if code:
        request["code"] = f"<ciphertext len={len(code)}>"

    attributes = request.get("userAttributes")
    if isinstance(attributes, dict) and "phone_number" in attributes:
        attributes["phone_number"] = mask_phone_number(attributes["phone_number"])

    return masked


def _mask_text(value: str, phone: Optional[str]) -> str:
    if phone:
        masked_phone = mask_phone_number(phone)
        value = value.replace(phone, masked_phone)
        if phone.startswith("+"):
            value = value.replace(phone[1:], masked_phone[1:])
    return mask_code(value)


def _mask_value(value: Any, phone: Optional[str]) -> Any:
    if isinstance(value, dict):
        return {
            key: mask_phone_number(item) if key == "phone" and isinstance(item, str)
            else _mask_value(item, phone)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_mask_value(item, phone) for item in value]
    if isinstance(value, str):
        return _mask_text(value, phone)
    if isinstance(value, int) and not isinstance(value, bool):
        # numeric codes or numbers without the leading +
        return _mask_text(str(value), phone)
    return value


def mask_gateway_body(body: Optional[str], phone: Optional[str] = None) -> Any:
    """
    Gateway response body that is safe to log.

    JSON bodies are decoded first so codes and numbers are masked in the
    real text, not in its escaped form. "phone" fields and any occurrence of
    the recipient number are masked; anything else falls back to plain text
    masking.
    """
    if not body:
        return ""
    try:
        data = json.loads(body)
    except ValueError:
        return _mask_text(body, phone)
    return _mask_value(data, phone)
